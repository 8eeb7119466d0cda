"""
Cloud Auth Session
==================
Owns the cloud sensor API's authentication lifecycle:

- two-step sign-in: credentials -> authorization code -> access token
- persistence of the token (and a stable local user identifier) in a secret store
- request spacing: every outbound request waits until a minimum interval has
  elapsed since the previous one
- the gated ``post`` helper used by the cloud backend for authenticated calls

The token is never refreshed proactively. An authenticated call answered with
401/403 drops the token and raises ``InvalidToken``; the consumer signs in again.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Callable, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from humidor.config import MonitorConfig
from humidor.domain.auth import AuthToken
from humidor.errors import (
    AuthenticationFailed,
    DecodingError,
    InvalidResponse,
    InvalidToken,
    NetworkError,
    RateLimited,
)
from humidor.schemas.cloud import (
    AccessTokenRequest,
    AccessTokenResponse,
    AuthorizeRequest,
    AuthorizeResponse,
    ErrorResponse,
)
from humidor.utils.cancellation import CancellationToken, checkpoint
from humidor.utils.time import coerce_datetime, utc_now
from infrastructure.logging.audit import NullAuditLogger
from infrastructure.secrets import (
    ACCESS_TOKEN_KEY,
    TOKEN_OBTAINED_AT_KEY,
    USER_IDENTIFIER_KEY,
    SecretStore,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

AUTHORIZE_PATH = "/oauth/authorize"
ACCESS_TOKEN_PATH = "/oauth/accesstoken"


def decode_payload(model: type[ModelT], body: Any) -> ModelT:
    """Validate a parsed JSON body against ``model``.

    Raises:
        InvalidResponse: body is not a JSON object
        DecodingError: body is an object of the wrong shape
    """
    if not isinstance(body, dict):
        raise InvalidResponse(f"Expected a JSON object, got {type(body).__name__}")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise DecodingError(f"{model.__name__}: {e.errors(include_url=False)}") from e


class CloudAuthSession:
    """Authenticated, rate-limited HTTP surface of the cloud sensor API.

    One instance is created by the composition root and shared by reference
    with the cloud backend; there is no module-level singleton.
    """

    def __init__(
        self,
        config: MonitorConfig,
        secret_store: SecretStore,
        http_session: requests.Session | None = None,
        audit_logger=None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ):
        """
        Args:
            config: Monitor configuration (base URL, timeouts, request spacing)
            secret_store: Persistence for the access token and user identifier
            http_session: requests session; a new one is created when omitted
            audit_logger: AuditLogger-compatible sink for sign-in/out events
            clock: Monotonic clock used by the rate limiter
            sleep: Sleep function used by the rate limiter (tests inject a fake)
        """
        self.base_url = config.cloud_base_url
        self.timeout = config.http_timeout_seconds
        self.min_interval = config.min_request_interval_seconds
        self.secret_store = secret_store
        self.http = http_session or requests.Session()
        self.audit = audit_logger or NullAuditLogger()

        self._clock = clock
        self._sleep = sleep

        self._state_lock = threading.RLock()
        self._token: AuthToken | None = None
        self._authenticated = False

        # Held across the whole check-then-stamp so concurrent callers queue up
        self._rate_lock = threading.Lock()
        self._last_request_at: float | None = None

    # ------------------------------------------------------------------
    # Token state
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        with self._state_lock:
            return self._authenticated

    @property
    def token(self) -> AuthToken | None:
        with self._state_lock:
            return self._token

    def restore(self) -> bool:
        """Load a token persisted by a previous process. Returns True when one was found."""
        access_token = self.secret_store.read(ACCESS_TOKEN_KEY)
        if not access_token:
            return False
        obtained_at = coerce_datetime(self.secret_store.read(TOKEN_OBTAINED_AT_KEY)) or utc_now()
        with self._state_lock:
            self._token = AuthToken(access_token=access_token, obtained_at=obtained_at)
            self._authenticated = True
        logger.info("Restored cloud session (token obtained %s)", obtained_at.isoformat())
        return True

    def user_identifier(self) -> str:
        """Return the stable local user identifier, creating it on first use."""
        existing = self.secret_store.read(USER_IDENTIFIER_KEY)
        if existing:
            return existing
        identifier = uuid.uuid4().hex
        self.secret_store.save(USER_IDENTIFIER_KEY, identifier)
        logger.debug("Created local user identifier")
        return identifier

    def _audit_actor(self) -> str:
        """Identifier for audit entries; never creates one."""
        return self.secret_store.read(USER_IDENTIFIER_KEY) or "anonymous"

    def _clear_token(self) -> bool:
        with self._state_lock:
            had_token = self._token is not None
            self._token = None
            self._authenticated = False
        self.secret_store.delete(ACCESS_TOKEN_KEY)
        self.secret_store.delete(TOKEN_OBTAINED_AT_KEY)
        return had_token

    def sign_out(self) -> None:
        """Forget the access token. Calling it while signed out is a no-op."""
        if self._clear_token():
            logger.info("Signed out of cloud sensor API")
            self.audit.log_event(self._audit_actor(), "sign_out", "cloud_session", "success")

    def _invalidate(self, reason: str) -> None:
        if self._clear_token():
            logger.warning("Cloud token rejected by provider, session cleared: %s", reason)
            self.audit.log_event(self._audit_actor(), "token_invalidated", "cloud_session", "cleared", reason=reason)

    # ------------------------------------------------------------------
    # Sign-in
    # ------------------------------------------------------------------

    def authenticate(self, email: str, password: str, cancel_token: CancellationToken | None = None) -> AuthToken:
        """Exchange credentials for an access token and persist it.

        Raises:
            AuthenticationFailed: non-200 status at either step
            InvalidResponse: a body that is not a JSON object
            DecodingError: a token payload of the wrong shape
            NetworkError: transport failure
        """
        # Any previous token is dropped before a new sign-in can overwrite it
        self._clear_token()

        try:
            body = self.post(
                AUTHORIZE_PATH,
                AuthorizeRequest(email=email, password=password).model_dump(),
                authenticated=False,
                cancel_token=cancel_token,
            )
            authorization = decode_payload(AuthorizeResponse, body).authorization

            body = self.post(
                ACCESS_TOKEN_PATH,
                AccessTokenRequest(authorization=authorization).model_dump(),
                authenticated=False,
                cancel_token=cancel_token,
            )
            access_token = decode_payload(AccessTokenResponse, body).accesstoken
        except AuthenticationFailed as e:
            logger.warning("Cloud sign-in rejected: %s", e.message)
            self.audit.log_event(self._audit_actor(), "sign_in", "cloud_session", "failure", reason=e.message)
            raise

        token = AuthToken(access_token=access_token, obtained_at=utc_now())
        self.secret_store.save(ACCESS_TOKEN_KEY, token.access_token)
        self.secret_store.save(TOKEN_OBTAINED_AT_KEY, token.obtained_at.isoformat())
        with self._state_lock:
            self._token = token
            self._authenticated = True

        logger.info("Signed in to cloud sensor API")
        self.audit.log_event(self.user_identifier(), "sign_in", "cloud_session", "success")
        return token

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    def _claim_slot(self) -> None:
        """Stamp a new request, or raise RateLimited with the remaining wait."""
        now = self._clock()
        if self._last_request_at is not None:
            remaining = self.min_interval - (now - self._last_request_at)
            if remaining > 0:
                raise RateLimited(remaining)
        self._last_request_at = now

    def _pause(self, seconds: float, cancel_token: CancellationToken | None) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        elif cancel_token is not None:
            cancel_token.wait(seconds)
        else:
            time.sleep(seconds)
        checkpoint(cancel_token, "rate limit wait")

    def check_rate_limit(self, cancel_token: CancellationToken | None = None) -> None:
        """Block until the minimum interval since the last request has elapsed, then stamp."""
        with self._rate_lock:
            while True:
                try:
                    self._claim_slot()
                    return
                except RateLimited as limited:
                    logger.debug("Cloud request spacing: sleeping %.3fs", limited.wait_seconds)
                    self._pause(limited.wait_seconds, cancel_token)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            try:
                parsed = ErrorResponse.model_validate(body)
                if parsed.message:
                    return parsed.message
            except ValidationError:
                pass
        text = (response.text or "").strip()
        return text or f"Request failed with status {response.status_code}"

    def post(
        self,
        path: str,
        payload: dict[str, Any] | None = None,
        *,
        authenticated: bool = True,
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        """Issue a rate-limited POST and return the parsed JSON body.

        Raises:
            InvalidToken: authenticated call without a token, or rejected with 401/403
            AuthenticationFailed: any other non-200 status
            InvalidResponse: body is not JSON
            NetworkError: transport failure
            OperationCancelled: ``cancel_token`` fired before dispatch
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if authenticated:
            token = self.token
            if token is None:
                raise InvalidToken()
            headers["Authorization"] = f"Bearer {token.access_token}"

        checkpoint(cancel_token, f"POST {path}")
        self.check_rate_limit(cancel_token)
        checkpoint(cancel_token, f"POST {path}")

        url = f"{self.base_url}{path}"
        logger.debug("POST %s", url)
        try:
            response = self.http.post(url, json=payload or {}, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Cloud request to %s failed: %s", path, e)
            raise NetworkError(e) from e

        if response.status_code != 200:
            message = self._error_message(response)
            if authenticated and response.status_code in (401, 403):
                self._invalidate(message)
                raise InvalidToken(message, response.status_code)
            raise AuthenticationFailed(message, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponse(f"Response from {path} is not valid JSON") from e

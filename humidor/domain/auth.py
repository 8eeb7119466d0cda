"""Cloud access token value object."""

from dataclasses import dataclass
from datetime import datetime

from humidor.utils.time import ensure_utc


@dataclass(frozen=True)
class AuthToken:
    """Access token obtained from the cloud sensor API, owned by the auth session."""

    access_token: str
    obtained_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "obtained_at", ensure_utc(self.obtained_at))

    def __repr__(self) -> str:
        # Never leak the token into logs
        return f"AuthToken(access_token='***', obtained_at={self.obtained_at.isoformat()})"

"""Cloud sensor API session."""

from humidor.services.cloud.auth_session import CloudAuthSession, decode_payload

__all__ = ["CloudAuthSession", "decode_payload"]

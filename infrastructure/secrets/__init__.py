from .secret_store import (
    ACCESS_TOKEN_KEY,
    TOKEN_OBTAINED_AT_KEY,
    USER_IDENTIFIER_KEY,
    InMemorySecretStore,
    JsonFileSecretStore,
    SecretStore,
)

__all__ = [
    "ACCESS_TOKEN_KEY",
    "TOKEN_OBTAINED_AT_KEY",
    "USER_IDENTIFIER_KEY",
    "InMemorySecretStore",
    "JsonFileSecretStore",
    "SecretStore",
]

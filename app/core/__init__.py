from .config import settings, get_settings
from .security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    generate_registration_key,
    hash_token,
    verify_password,
    get_password_hash
)
from .exceptions import (
    AppError,
    NotFoundError,
    PermissionDeniedError,
    ConflictError,
    AuthenticationError,
    BadRequestError,
    DatabaseQueryError,
    ProvisioningError,
    EmailNotConfiguredError
)

__all__ = [
    "settings",
    "get_settings",
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "generate_registration_key",
    "hash_token",
    "verify_password",
    "get_password_hash",
    "AppError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "AuthenticationError",
    "BadRequestError",
    "DatabaseQueryError",
    "ProvisioningError",
    "EmailNotConfiguredError"
]

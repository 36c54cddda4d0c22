from .tenant import Tenant
from .user import User, RefreshToken, AccountType
from .registration_key import RegistrationKey
from .system_log import SystemLog
from .admin import AdminUser

__all__ = [
    "Tenant",
    "User",
    "RefreshToken",
    "AccountType",
    "RegistrationKey",
    "SystemLog",
    "AdminUser"
]

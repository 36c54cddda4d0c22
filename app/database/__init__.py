from .session import Base, engine, AsyncSessionLocal, get_db, init_db, check_db
from .tenant import (
    TenantDatabase,
    TenantConnection,
    tenant_database,
    schema_name_for,
    validate_schema_name,
    render_sql,
    row_to_dict
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "check_db",
    "TenantDatabase",
    "TenantConnection",
    "tenant_database",
    "schema_name_for",
    "validate_schema_name",
    "render_sql",
    "row_to_dict"
]

"""
Advocacia SaaS - Common Schema Helpers
"""
import uuid
from typing import Optional

NO_LINK = "none"


def validate_link_id(value: Optional[str]) -> Optional[str]:
    """
    IDs de vínculo (projeto/cliente) aceitam um UUID ou "none",
    que remove o vínculo.
    """
    if value is None or value == NO_LINK:
        return value
    if value == "":
        return NO_LINK
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ValueError("ID inválido")

"""
Advocacia SaaS - Health API
"""
import logging
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core import settings
from app.database import check_db
from app.database.tenant import tenant_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/ping")
async def ping():
    return {"message": "pong"}


@router.get("/health")
async def health_check():
    """Verifica o control plane e o pool dos tenants"""
    timestamp = datetime.utcnow().isoformat()
    try:
        await check_db()
    except Exception as e:
        logger.error(f"Health check falhou: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": str(e), "timestamp": timestamp}
        )

    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": {
            "controlPlane": "connected",
            "tenants": "connected" if tenant_database.is_connected else "disconnected"
        },
        "timestamp": timestamp
    }

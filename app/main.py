"""
Advocacia SaaS - Main Application
Backend multi-tenant para escritórios de advocacia (um schema por escritório)
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core import settings
from app.core.exceptions import AppError
from app.database import AsyncSessionLocal, init_db
from app.database.tenant import tenant_database
from app.models import SystemLog
from app.api import (
    auth_router,
    admin_router,
    clients_router,
    projects_router,
    tasks_router,
    cashflow_router,
    billing_router,
    invoices_router,
    publications_router,
    notifications_router,
    dashboard_router,
    settings_router,
    health_router
)

# Rate limiting
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.api.auth import limiter

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle do aplicativo"""
    # Startup
    logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Ambiente: {settings.ENVIRONMENT}")

    await init_db()

    # Sem o pool as rotas de escritório respondem 503; admin e health seguem no ar
    try:
        await tenant_database.connect()
    except Exception as e:
        logger.error(f"Falha ao conectar o pool de tenants: {e}")

    yield

    # Shutdown
    logger.info("Encerrando...")
    await tenant_database.close()


# Middleware de headers de seguranca
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adiciona headers de seguranca em todas as respostas"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Cache control para endpoints de autenticacao
        if "/auth" in request.url.path or "/login" in request.url.path:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Loga método, caminho, status e duração de cada requisição"""
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration:.0f}ms")
        return response


# Cria aplicação
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Gestão de escritórios de advocacia: CRM, projetos, tarefas, financeiro e publicações",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# Configura rate limiter na aplicacao
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Erros inesperados viram 500 e são registrados em system_logs"""
    logger.exception(f"Erro não tratado em {request.method} {request.url.path}: {exc}")
    try:
        async with AsyncSessionLocal() as session:
            session.add(SystemLog(
                level="error",
                message=str(exc)[:1000],
                metadata_={"method": request.method, "path": request.url.path}
            ))
            await session.commit()
    except Exception as log_error:
        logger.error(f"Falha ao registrar erro em system_logs: {log_error}")

    return JSONResponse(status_code=500, content={"detail": "Erro interno do servidor"})


app.add_middleware(RequestLoggingMiddleware)

# Headers de seguranca (adicionar ANTES do CORS)
app.add_middleware(SecurityHeadersMiddleware)

# CORS (deve vir DEPOIS dos headers de seguranca)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(clients_router, prefix="/api")
app.include_router(projects_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(cashflow_router, prefix="/api")
app.include_router(billing_router, prefix="/api")
app.include_router(invoices_router, prefix="/api")
app.include_router(publications_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(settings_router, prefix="/api")
app.include_router(health_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )

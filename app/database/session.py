"""
Advocacia SaaS - Database Session
Control plane (schema admin): tenants, usuarios, tokens, chaves e logs
"""
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text

from app.core.config import settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    """
    SQLite não tem schemas: o schema admin é removido na tradução.
    Em PostgreSQL as tabelas ficam em admin.*
    """
    if url.startswith("sqlite"):
        return {"execution_options": {"schema_translate_map": {settings.ADMIN_SCHEMA: None}}}
    return {"pool_pre_ping": True}


# Engine assíncrono
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **engine_options(settings.DATABASE_URL)
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

# Base para models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency para injetar sessão do banco"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Inicializa banco de dados (cria schema admin e tabelas)"""
    async with engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{settings.ADMIN_SCHEMA}"'))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Control plane inicializado")


async def check_db() -> bool:
    """Verifica conexão com o control plane"""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True

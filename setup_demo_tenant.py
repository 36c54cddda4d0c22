# setup_demo_tenant.py - Cria escritório de demonstração com um usuário de cada tipo
import asyncio
import logging

from sqlalchemy import select

from app.core.provisioning import schema_provisioner
from app.core.security import get_password_hash
from app.database import AsyncSessionLocal, init_db
from app.database.tenant import tenant_database
from app.models import Tenant, User
from app.services.tenants import provisioned_tenant

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("setup_demo_tenant")

DEMO_TENANT = "Escritório Silva & Associados (Demo)"
DEMO_PASSWORD = "123456"
DEMO_USERS = [
    ("admin@escritorio.com", "Dr. Carlos Silva", "gerencial"),
    ("financeiro@escritorio.com", "Ana Financeiro", "composta"),
    ("atendimento@escritorio.com", "João Atendimento", "simples"),
]


async def main():
    await init_db()
    await tenant_database.connect()
    try:
        async with AsyncSessionLocal() as db:
            existing = (await db.execute(select(Tenant).where(Tenant.name == DEMO_TENANT))).scalar_one_or_none()
            if existing:
                logger.info(f"Escritório demo já existe: {existing.schema_name}")
                return

            async with provisioned_tenant(
                db,
                schema_provisioner,
                DEMO_TENANT,
                plan_type="premium",
                max_users_simples=10,
                max_users_composta=5,
                max_users_gerencial=2
            ) as tenant:
                for email, name, account_type in DEMO_USERS:
                    user = User(
                        tenant_id=tenant.id,
                        email=email,
                        password_hash=get_password_hash(DEMO_PASSWORD),
                        name=name,
                        account_type=account_type,
                        is_active=True
                    )
                    user.tenant = tenant
                    db.add(user)

        print(f"Escritório criado: {tenant.name} ({tenant.schema_name})")
        for email, _, account_type in DEMO_USERS:
            print(f"  {account_type:<10} {email} / {DEMO_PASSWORD}")
    finally:
        await tenant_database.close()


if __name__ == "__main__":
    asyncio.run(main())

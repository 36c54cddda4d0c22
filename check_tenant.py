# check_tenant.py - Verifica o schema de um escritório
# Uso: python check_tenant.py <email do usuário ou id do tenant>
import asyncio
import sys

from sqlalchemy import select, func

from app.core.provisioning import schema_provisioner
from app.database import AsyncSessionLocal
from app.database.tenant import tenant_database
from app.models import Tenant, User


async def find_tenant(db, identifier: str):
    if "@" in identifier:
        user = (await db.execute(
            select(User).where(func.lower(User.email) == identifier.lower())
        )).scalar_one_or_none()
        return user.tenant if user else None
    return await db.get(Tenant, identifier)


async def main(identifier: str):
    async with AsyncSessionLocal() as db:
        tenant = await find_tenant(db, identifier)
        if not tenant:
            print("Tenant nao encontrado!")
            return

        print(f"=== TENANT {tenant.name} ===")
        print(f"id: {tenant.id}")
        print(f"schema: {tenant.schema_name}")
        print(f"plano: {tenant.plan_type}")
        print(f"ativo: {tenant.is_active}")
        for account_type in ("simples", "composta", "gerencial"):
            print(f"limite {account_type}: {tenant.max_users_for(account_type)}")

    await tenant_database.connect()
    try:
        ok, info = await schema_provisioner.check_schema(tenant.schema_name)
    finally:
        await tenant_database.close()

    print(f"status: {info['status']}")
    if ok:
        print(f"tabelas: {info['tables']}")
        for table, count in info["records"].items():
            print(f"  {table}: {count}")
    else:
        print(f"problema: {info.get('missing') or info.get('error')}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Uso: python check_tenant.py <email|tenant_id>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))

"""
Advocacia SaaS - CLI Admin
Ferramenta de linha de comando para o console administrativo

Uso:
    python admin_cli.py login
    python admin_cli.py metrics
    python admin_cli.py tenants list
    python admin_cli.py tenants create "Nome do Escritório" [plano]
    python admin_cli.py keys list [tenant_id]
    python admin_cli.py keys create <simples|composta|gerencial> [tenant_id] [usos]
    python admin_cli.py keys revoke <key_id>
"""
import os
import sys
import httpx
from pathlib import Path

BASE_URL = os.getenv("ADVOCACIA_API_URL", "http://localhost:8080")
TOKEN_FILE = Path(".admin_token")


def save_token(token: str):
    TOKEN_FILE.write_text(token)


def load_token() -> str:
    if TOKEN_FILE.exists():
        return TOKEN_FILE.read_text().strip()
    return None


def get_headers():
    token = load_token()
    if not token:
        print("Erro: Faça login primeiro com 'python admin_cli.py login'")
        sys.exit(1)
    return {"Authorization": f"Bearer {token}"}


def error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("detail", response.text)
    except ValueError:
        return response.text


def cmd_login():
    """Login de administrador"""
    email = input("Email [admin@advocacia-saas.com]: ").strip() or "admin@advocacia-saas.com"
    password = input("Senha: ").strip()

    try:
        response = httpx.post(
            f"{BASE_URL}/api/admin/auth/login",
            json={"email": email, "password": password}
        )
        if response.status_code == 200:
            data = response.json()
            save_token(data["tokens"]["accessToken"])
            print(f"\n✓ Login bem sucedido!")
            print(f"  Admin: {data['admin']['email']} ({data['admin']['role']})")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro de conexão: {e}")


def cmd_metrics():
    """Mostra métricas globais"""
    try:
        response = httpx.get(f"{BASE_URL}/api/admin/metrics", headers=get_headers())
        if response.status_code == 200:
            metrics = response.json()
            print(f"\n{'='*40}")
            print(f"  MÉTRICAS DA PLATAFORMA")
            print(f"{'='*40}")
            print(f"  Escritórios: {metrics['tenants']['total']} (ativos: {metrics['tenants']['active']})")
            print(f"  Usuários ativos: {metrics['users']['total']}")
            print(f"  Chaves disponíveis:")
            for item in metrics["registrationKeys"]:
                print(f"    - {item['accountType']}: {item['count']}")
            print(f"{'='*40}")
            for log in metrics["recentActivity"]:
                print(f"  [{log['level']}] {log['message']} ({log.get('tenantName') or '-'})")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_tenants_list():
    """Lista escritórios"""
    try:
        response = httpx.get(f"{BASE_URL}/api/admin/tenants", headers=get_headers())
        if response.status_code == 200:
            tenants = response.json()["tenants"]
            print(f"\n{'='*90}")
            print(f"{'ID':<36} | {'Nome':<25} | {'Plano':<10} | {'Usuários':<8} | {'Ativo':<5}")
            print(f"{'='*90}")
            for t in tenants:
                active = "sim" if t["isActive"] else "não"
                print(f"{t['id']:<36} | {t['name'][:25]:<25} | {t['planType']:<10} | {t['userCount']:<8} | {active:<5}")
            print(f"\nTotal: {len(tenants)} escritórios")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_tenants_create(name: str, plan: str = "basic"):
    """Cria escritório e provisiona o schema"""
    try:
        response = httpx.post(
            f"{BASE_URL}/api/admin/tenants",
            json={"name": name, "planType": plan},
            headers=get_headers(),
            timeout=60
        )
        if response.status_code == 201:
            tenant = response.json()["tenant"]
            print(f"\n✓ Escritório criado!")
            print(f"  ID: {tenant['id']}")
            print(f"  Nome: {tenant['name']}")
            print(f"  Schema: {tenant['schema_name']}")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_keys_list(tenant_id: str = None):
    """Lista chaves de registro"""
    params = {"tenantId": tenant_id} if tenant_id else None
    try:
        response = httpx.get(f"{BASE_URL}/api/admin/keys", params=params, headers=get_headers())
        if response.status_code == 200:
            keys = response.json()["keys"]
            print(f"\n{'='*90}")
            print(f"{'ID':<36} | {'Prefixo':<8} | {'Tipo':<9} | {'Usos':<7} | {'Escritório':<20}")
            print(f"{'='*90}")
            for k in keys:
                tenant_name = (k["tenant"] or {}).get("name") or "novo escritório"
                uses = f"{k['usesLeft']}/{k['usesAllowed']}"
                status = " (revogada)" if k["revoked"] else ""
                print(f"{k['id']:<36} | {k['keyPrefix']:<8} | {k['accountType']:<9} | {uses:<7} | {tenant_name[:20]:<20}{status}")
            print(f"\nTotal: {len(keys)} chaves")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_keys_create(account_type: str, tenant_id: str = None, uses: int = 1):
    """Gera chave de registro"""
    payload = {
        "accountType": account_type,
        "usesAllowed": int(uses),
        "singleUse": int(uses) == 1
    }
    if tenant_id:
        payload["tenantId"] = tenant_id

    try:
        response = httpx.post(f"{BASE_URL}/api/admin/keys", json=payload, headers=get_headers())
        if response.status_code == 201:
            data = response.json()
            print(f"\n{'='*50}")
            print(f"  ✓ CHAVE CRIADA COM SUCESSO!")
            print(f"{'='*50}")
            print(f"  Chave: {data['key']}")
            print(f"  Tipo: {data['metadata']['accountType']}")
            print(f"  Usos: {data['metadata']['usesAllowed']}")
            print(f"{'='*50}")
            print(f"\n  A chave não será exibida novamente!")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_keys_revoke(key_id: str):
    """Revoga uma chave"""
    try:
        response = httpx.patch(f"{BASE_URL}/api/admin/keys/{key_id}/revoke", headers=get_headers())
        if response.status_code == 200:
            print(f"✓ Chave {key_id} revogada com sucesso!")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def print_help():
    print("""
Advocacia SaaS - CLI Admin
==========================

Comandos disponíveis:

  python admin_cli.py login                              - Fazer login
  python admin_cli.py metrics                            - Ver métricas

  python admin_cli.py tenants list                       - Listar escritórios
  python admin_cli.py tenants create "Nome" [plano]      - Criar escritório

  python admin_cli.py keys list [tenant_id]              - Listar chaves
  python admin_cli.py keys create <tipo> [tenant_id] [usos]
                                                         - Gerar chave
                                                           Tipos: simples, composta, gerencial
  python admin_cli.py keys revoke <key_id>               - Revogar chave

Exemplos:
  python admin_cli.py tenants create "Silva & Associados" premium
  python admin_cli.py keys create gerencial
  python admin_cli.py keys create simples 3f1c...-uuid 5
""")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print_help()
        sys.exit(0)

    cmd = sys.argv[1].lower()

    if cmd == "login":
        cmd_login()
    elif cmd == "metrics":
        cmd_metrics()
    elif cmd == "tenants":
        if len(sys.argv) < 3:
            print("Uso: tenants [list|create]")
        elif sys.argv[2] == "list":
            cmd_tenants_list()
        elif sys.argv[2] == "create" and len(sys.argv) >= 4:
            plan = sys.argv[4] if len(sys.argv) > 4 else "basic"
            cmd_tenants_create(sys.argv[3], plan)
        else:
            print("Uso: tenants create 'Nome do Escritório' [plano]")
    elif cmd == "keys":
        if len(sys.argv) < 3:
            print("Uso: keys [list|create|revoke]")
        elif sys.argv[2] == "list":
            cmd_keys_list(sys.argv[3] if len(sys.argv) > 3 else None)
        elif sys.argv[2] == "create" and len(sys.argv) >= 4:
            tenant_id = sys.argv[4] if len(sys.argv) > 4 else None
            uses = sys.argv[5] if len(sys.argv) > 5 else 1
            cmd_keys_create(sys.argv[3], tenant_id, uses)
        elif sys.argv[2] == "revoke" and len(sys.argv) >= 4:
            cmd_keys_revoke(sys.argv[3])
        else:
            print("Uso: keys create <tipo> [tenant_id] [usos]")
    elif cmd == "help":
        print_help()
    else:
        print(f"Comando desconhecido: {cmd}")
        print_help()

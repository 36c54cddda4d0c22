"""
Advocacia SaaS - Publication Service

Publicações dos diários oficiais. Diferente dos demais módulos, são
isoladas POR USUÁRIO: toda consulta filtra user_id do usuário autenticado.
"""
import logging

from app.core.exceptions import NotFoundError
from app.schemas.publication import PublicationCreate
from .base import TenantServiceBase

logger = logging.getLogger(__name__)

PUBLICATION_STATUSES = ("nova", "pendente", "atribuida", "finalizada", "descartada")


class PublicationService(TenantServiceBase):

    async def get_all(self, search: str = None, status: str = None) -> list[dict]:
        self.require_permission("read", "publications")

        sql = "SELECT * FROM ${schema}.publications WHERE user_id = $1"
        params = [self.user.id]

        if search:
            params.append(f"%{search}%")
            n = len(params)
            sql += f" AND (processo ILIKE ${n} OR nome_pesquisado ILIKE ${n})"

        if status:
            params.append(status)
            sql += f" AND status = ${len(params)}"

        sql += " ORDER BY data_publicacao DESC, created_at DESC"

        return await self.conn.fetch(sql, *params)

    async def get_by_id(self, publication_id: str) -> dict:
        self.require_permission("read", "publications")

        publication = await self.conn.fetchrow(
            "SELECT * FROM ${schema}.publications WHERE id = $1 AND user_id = $2",
            publication_id,
            self.user.id
        )
        if not publication:
            raise NotFoundError("Publicação não encontrada")
        return publication

    async def create(self, data: PublicationCreate) -> dict:
        self.require_permission("write", "publications")

        publication = await self.conn.fetchrow(
            """
            INSERT INTO ${schema}.publications (
                user_id, data_publicacao, processo, diario, vara_comarca,
                nome_pesquisado, status, conteudo, observacoes, responsavel,
                numero_processo, cliente, urgencia, tags, created_at, updated_at
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, NOW(), NOW()
            ) RETURNING *
            """,
            self.user.id,
            data.data_publicacao, data.processo, data.diario, data.vara_comarca,
            data.nome_pesquisado, data.status, data.conteudo, data.observacoes,
            data.responsavel, data.numero_processo, data.cliente, data.urgencia, data.tags
        )

        await self.audit_log("publications", "CREATE", publication["id"], None, publication)
        return publication

    async def update_status(self, publication_id: str, status: str, observacoes: str = None) -> dict:
        self.require_permission("write", "publications")

        old_publication = await self.get_by_id(publication_id)
        fields = {"status": status}
        if observacoes is not None:
            fields["observacoes"] = observacoes

        publication = await self.update_record(
            "publications", publication_id, fields, scope={"user_id": self.user.id}
        )
        if not publication:
            raise NotFoundError("Publicação não encontrada")

        await self.audit_log("publications", "UPDATE", publication_id, old_publication, publication)

        # nova -> pendente: publicação foi lida
        if old_publication.get("status") == "nova" and status == "pendente":
            await self.create_notification(
                "info",
                "Publicação Visualizada",
                f"{self.user.name} visualizou a publicação {publication['processo']}",
                "publications",
                "publication",
                publication["id"],
                {"publication_id": publication["id"], "page": "/publicacoes"}
            )

        return publication

    async def assign(self, publication_id: str, assignee_id: str, assignee_name: str) -> dict:
        """
        Atribui a publicação a outro usuário do escritório.
        O chamador garante que o usuário pertence ao mesmo tenant e está ativo.
        """
        self.require_permission("write", "publications")

        old_publication = await self.get_by_id(publication_id)

        publication = await self.update_record(
            "publications",
            publication_id,
            {
                "status": "atribuida",
                "responsavel": assignee_name,
                "atribuido_para_id": assignee_id,
                "atribuido_para_nome": assignee_name
            },
            raw_assignments=["data_atribuicao = NOW()"],
            scope={"user_id": self.user.id}
        )
        if not publication:
            raise NotFoundError("Publicação não encontrada")

        await self.audit_log("publications", "UPDATE", publication_id, old_publication, publication)
        await self.create_notification(
            "info",
            "Publicação Atribuída",
            f"{self.user.name} atribuiu publicação para {assignee_name}",
            "publications",
            "publication",
            publication["id"],
            {"publication_id": publication["id"], "page": "/publicacoes"},
            assignee_id
        )
        return publication

    async def delete(self, publication_id: str):
        self.require_permission("write", "publications")

        publication = await self.get_by_id(publication_id)
        await self.conn.execute(
            "DELETE FROM ${schema}.publications WHERE id = $1 AND user_id = $2",
            publication_id,
            self.user.id
        )
        await self.audit_log("publications", "DELETE", publication_id, publication, None)

    async def get_stats(self) -> dict:
        self.require_permission("read", "publications")

        rows = await self.conn.fetch(
            """
            SELECT status, COUNT(*) AS count
            FROM ${schema}.publications
            WHERE user_id = $1
            GROUP BY status
            """,
            self.user.id
        )
        counts = {status: 0 for status in PUBLICATION_STATUSES}
        for row in rows:
            counts[row["status"]] = int(row["count"])

        total = sum(counts.values())
        return {
            "total": total,
            "novas": counts["nova"],
            "pendentes": counts["pendente"],
            "atribuidas": counts["atribuida"],
            "finalizadas": counts["finalizada"],
            "descartadas": counts["descartada"],
            "porcentagemConcluidas": round(counts["finalizada"] * 100 / total) if total else 0
        }

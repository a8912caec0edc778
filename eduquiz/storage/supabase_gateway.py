"""Supabase Gateway - Persistencia via PostgREST (HTTP)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..exceptions import PersistenceError, QuizNotFoundError
from .gateway import PersistenceGateway, Record

logger = logging.getLogger(__name__)


class SupabaseGateway(PersistenceGateway):
    """Gateway sobre a API REST do Supabase (PostgREST).

    Operacoes simples usam ``/rest/v1/{table}``; as operacoes atomicas
    chamam funcoes SQL via RPC (ver ``supabase/migrations``):

        - ``increment_counter``: ``UPDATE ... SET col = col + delta``
        - ``save_aggregate``: pai + filhos em uma unica transacao

    Example:
        >>> gateway = SupabaseGateway("https://xyz.supabase.co", "service-key")
        >>> quizzes = await gateway.select("quizzes", {"is_published": True},
        ...                                order_by="created_at", descending=True)
        >>> await gateway.aclose()
    """

    REST_PATH = "/rest/v1"
    # invalid_text_representation: filtro com valor que nao e UUID valido
    INVALID_TEXT_CODE = "22P02"
    INCREMENT_RPC = "increment_counter"
    AGGREGATE_RPC = "save_aggregate"

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Inicializa gateway.

        Args:
            url: URL do projeto Supabase
            api_key: Chave enviada em ``apikey`` e ``Authorization``
            timeout: Timeout HTTP em segundos
            client: Cliente httpx pronto (testes injetam MockTransport)
        """
        if not url:
            raise ValueError("SUPABASE_URL não configurada")

        self.url = url.rstrip("/")
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(
            base_url=f"{self.url}{self.REST_PATH}",
            headers=headers,
            timeout=timeout,
        )
        self._owns_client = client is None

    @staticmethod
    def _encode(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        return str(value)

    def _filter_params(self, filters: Record | None) -> dict[str, str]:
        params = {}
        for key, value in (filters or {}).items():
            op = "is" if value is None else "eq"
            params[key] = f"{op}.{self._encode(value)}"
        return params

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("code") if isinstance(body, dict) else None

    async def _select_rows(self, table: str, params: dict[str, str]) -> list[Record]:
        try:
            return await self._request("GET", f"/{table}", params=params) or []
        except PersistenceError as e:
            if e.details.get("code") != self.INVALID_TEXT_CODE:
                raise
            logger.debug(f"Filtro inválido em {table} tratado como vazio: {params}")
            return []

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        representation: bool = False,
    ) -> Any:
        headers = {"Prefer": "return=representation"} if representation else None
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase {method} {path} falhou: {e}")
            raise PersistenceError(
                "Serviço de persistência indisponível",
                details={"method": method, "path": path, "error": str(e)},
            ) from e

        if response.status_code >= 400:
            logger.error(
                f"Supabase {method} {path} retornou {response.status_code}: {response.text[:200]}"
            )
            raise PersistenceError(
                f"Erro de persistência ({response.status_code})",
                details={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "code": self._error_code(response),
                    "body": response.text[:500],
                },
            )

        logger.debug(f"Supabase {method} {path} -> {response.status_code}")
        if not response.content:
            return None
        return response.json()

    async def insert(self, table: str, record: Record) -> Record:
        rows = await self._request("POST", f"/{table}", json=record, representation=True)
        if not rows:
            raise PersistenceError(
                f"Insert em {table} não retornou registro", details={"table": table}
            )
        return rows[0]

    async def insert_many(self, table: str, records: list[Record]) -> list[Record]:
        if not records:
            return []
        rows = await self._request("POST", f"/{table}", json=records, representation=True)
        return rows or []

    async def select(
        self,
        table: str,
        filters: Record | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        params = {"select": "*", **self._filter_params(filters)}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        return await self._select_rows(table, params)

    async def select_one(self, table: str, filters: Record) -> Record | None:
        params = {"select": "*", "limit": "1", **self._filter_params(filters)}
        rows = await self._select_rows(table, params)
        return rows[0] if rows else None

    async def update(self, table: str, filters: Record, patch: Record) -> list[Record]:
        if not filters:
            # PostgREST recusa UPDATE sem filtro; evitar atualizar a tabela inteira
            raise ValueError("update exige ao menos um filtro")
        return await self._request(
            "PATCH",
            f"/{table}",
            params=self._filter_params(filters),
            json=patch,
            representation=True,
        ) or []

    async def increment(
        self, table: str, filters: Record, column: str, delta: int
    ) -> int | None:
        result = await self._request(
            "POST",
            f"/rpc/{self.INCREMENT_RPC}",
            json={
                "target_table": table,
                "target_column": column,
                "match": filters,
                "delta": delta,
            },
        )
        return None if result is None else int(result)

    async def save_aggregate(
        self,
        parent_table: str,
        parent: Record,
        child_table: str,
        children: list[Record],
        foreign_key: str,
        parent_id: str | None = None,
    ) -> tuple[Record, list[Record]]:
        result = await self._request(
            "POST",
            f"/rpc/{self.AGGREGATE_RPC}",
            json={
                "parent_table": parent_table,
                "parent": parent,
                "child_table": child_table,
                "children": children,
                "foreign_key": foreign_key,
                "parent_id": parent_id,
            },
        )
        if not result or not result.get("parent"):
            raise QuizNotFoundError(
                f"Registro {parent_id} não encontrado em {parent_table}",
                details={"table": parent_table, "id": parent_id},
            )
        return result["parent"], result.get("children") or []

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

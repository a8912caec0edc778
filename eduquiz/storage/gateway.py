"""Persistence Gateway - Contrato generico de armazenamento de registros."""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any

from ..exceptions import QuizNotFoundError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class PersistenceGateway(ABC):
    """Armazenamento duravel de registros por tabela.

    Todas as operacoes sao corrotinas; falhas de rede/servico devem ser
    levantadas como ``PersistenceError``.
    """

    @abstractmethod
    async def insert(self, table: str, record: Record) -> Record:
        """Insere um registro e retorna a linha com ``id`` atribuido."""

    @abstractmethod
    async def insert_many(self, table: str, records: list[Record]) -> list[Record]:
        """Insere varios registros em uma unica chamada."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Record | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        """Lista registros cujas colunas batem com ``filters`` (igualdade)."""

    @abstractmethod
    async def select_one(self, table: str, filters: Record) -> Record | None:
        """Retorna o primeiro registro que bate com ``filters`` ou None."""

    @abstractmethod
    async def update(self, table: str, filters: Record, patch: Record) -> list[Record]:
        """Aplica ``patch`` nos registros filtrados e retorna as linhas atualizadas."""

    @abstractmethod
    async def increment(
        self, table: str, filters: Record, column: str, delta: int
    ) -> int | None:
        """Incremento atomico de uma coluna numerica.

        Returns:
            Novo valor, ou None se nenhum registro bateu com o filtro
        """

    @abstractmethod
    async def save_aggregate(
        self,
        parent_table: str,
        parent: Record,
        child_table: str,
        children: list[Record],
        foreign_key: str,
        parent_id: str | None = None,
    ) -> tuple[Record, list[Record]]:
        """Grava pai + filhos como uma unidade.

        Sem ``parent_id`` insere um pai novo; com ``parent_id`` atualiza o
        pai e substitui todos os filhos. Ou tudo e gravado, ou nada.
        """

    async def aclose(self) -> None:
        """Libera recursos (conexoes HTTP, etc)."""


def _matches(record: Record, filters: Record | None) -> bool:
    if not filters:
        return True
    return all(record.get(key) == value for key, value in filters.items())


class InMemoryGateway(PersistenceGateway):
    """Gateway em memoria para desenvolvimento e testes.

    Escritas sao serializadas por um ``asyncio.Lock``, o que torna
    ``increment`` e ``save_aggregate`` atomicos dentro do event loop.

    Example:
        >>> gateway = InMemoryGateway()
        >>> row = await gateway.insert("quizzes", {"title": "Algebra"})
        >>> await gateway.select_one("quizzes", {"id": row["id"]})
    """

    # Coluna de timestamp preenchida pelo "servidor" em cada tabela
    TIMESTAMP_COLUMNS = {
        "quizzes": "created_at",
        "quiz_questions": "created_at",
        "quiz_results": "completed_at",
    }

    def __init__(self, tables: dict[str, list[Record]] | None = None):
        self._tables: dict[str, list[Record]] = defaultdict(list)
        for name, rows in (tables or {}).items():
            self._tables[name] = [copy.deepcopy(r) for r in rows]
        self._lock = asyncio.Lock()
        self._last_timestamp: datetime | None = None

    def _now(self) -> datetime:
        # Estritamente crescente para ordenacao "mais recente primeiro" estavel
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _prepare(self, table: str, record: Record) -> Record:
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid.uuid4()))
        ts_column = self.TIMESTAMP_COLUMNS.get(table)
        if ts_column and row.get(ts_column) is None:
            row[ts_column] = self._now()
        return row

    def rows(self, table: str) -> list[Record]:
        """Copia das linhas de uma tabela (inspecao em testes)."""
        return [copy.deepcopy(r) for r in self._tables.get(table, [])]

    async def insert(self, table: str, record: Record) -> Record:
        async with self._lock:
            row = self._prepare(table, record)
            self._tables[table].append(row)
        logger.debug(f"insert {table}: {row['id']}")
        return copy.deepcopy(row)

    async def insert_many(self, table: str, records: list[Record]) -> list[Record]:
        async with self._lock:
            rows = [self._prepare(table, r) for r in records]
            self._tables[table].extend(rows)
        logger.debug(f"insert_many {table}: {len(rows)} linhas")
        return [copy.deepcopy(r) for r in rows]

    async def select(
        self,
        table: str,
        filters: Record | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Record]:
        rows = [r for r in self._tables.get(table, []) if _matches(r, filters)]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        return [copy.deepcopy(r) for r in rows]

    async def select_one(self, table: str, filters: Record) -> Record | None:
        for row in self._tables.get(table, []):
            if _matches(row, filters):
                return copy.deepcopy(row)
        return None

    async def update(self, table: str, filters: Record, patch: Record) -> list[Record]:
        async with self._lock:
            updated = []
            for row in self._tables.get(table, []):
                if _matches(row, filters):
                    row.update(copy.deepcopy(patch))
                    updated.append(copy.deepcopy(row))
        logger.debug(f"update {table}: {len(updated)} linhas")
        return updated

    async def increment(
        self, table: str, filters: Record, column: str, delta: int
    ) -> int | None:
        async with self._lock:
            for row in self._tables.get(table, []):
                if _matches(row, filters):
                    row[column] = (row.get(column) or 0) + delta
                    return row[column]
        return None

    async def save_aggregate(
        self,
        parent_table: str,
        parent: Record,
        child_table: str,
        children: list[Record],
        foreign_key: str,
        parent_id: str | None = None,
    ) -> tuple[Record, list[Record]]:
        async with self._lock:
            # Preparar tudo antes de mutar as tabelas
            if parent_id is None:
                parent_row = self._prepare(parent_table, parent)
                existing = None
            else:
                existing = next(
                    (r for r in self._tables.get(parent_table, []) if r.get("id") == parent_id),
                    None,
                )
                if existing is None:
                    raise QuizNotFoundError(
                        f"Registro {parent_id} não encontrado em {parent_table}",
                        details={"table": parent_table, "id": parent_id},
                    )
                parent_row = {**copy.deepcopy(existing), **copy.deepcopy(parent)}

            child_rows = [
                self._prepare(child_table, {**child, foreign_key: parent_row["id"]})
                for child in children
            ]

            if existing is None:
                self._tables[parent_table].append(parent_row)
            else:
                existing.clear()
                existing.update(parent_row)

            kept = [
                r for r in self._tables.get(child_table, [])
                if r.get(foreign_key) != parent_row["id"]
            ]
            self._tables[child_table] = kept + child_rows

        logger.debug(
            f"save_aggregate {parent_table}:{parent_row['id']} "
            f"com {len(child_rows)} filhos em {child_table}"
        )
        return copy.deepcopy(parent_row), [copy.deepcopy(r) for r in child_rows]

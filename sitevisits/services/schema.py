# sitevisits/services/schema.py
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateTable, CreateIndex

from sitevisits.models.visit import Visit

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "DATABASE_URL not set"


@dataclass(frozen=True)
class SchemaStatus:
    ok: bool
    reason: Optional[str] = None


class SchemaInitializer:
    """
    Лениво создает таблицу visits и ее индексы.

    Одна попытка на процесс: после успеха больше ничего не делает,
    после ошибки запоминает ее и отдает всем последующим вызовам без повтора.
    Повторить можно только перезапуском процесса.
    """

    def __init__(self, engine: Optional[AsyncEngine]):
        self._engine = engine
        self.ready = False
        self.last_error: Optional[str] = None

    async def ensure(self) -> SchemaStatus:
        if self._engine is None:
            return SchemaStatus(ok=False, reason=NOT_CONFIGURED)
        if self.ready:
            return SchemaStatus(ok=True)
        if self.last_error is not None:
            return SchemaStatus(ok=False, reason=self.last_error)

        table = Visit.__table__
        try:
            # IF NOT EXISTS: параллельные первые запросы могут прогнать DDL одновременно, это безвредно
            async with self._engine.begin() as conn:
                await conn.execute(CreateTable(table, if_not_exists=True))
                for index in sorted(table.indexes, key=lambda i: i.name):
                    await conn.execute(CreateIndex(index, if_not_exists=True))
        except Exception as e:
            if self.ready:
                # Параллельный вызов уже создал схему
                logger.warning(f"Visits schema DDL failed after the table became ready: {e}")
                return SchemaStatus(ok=True)
            self.last_error = str(e)
            logger.error(f"Failed to initialize visits table: {e}")
            return SchemaStatus(ok=False, reason=self.last_error)

        if not self.ready:
            logger.info("Visits table and indexes are ready.")
        self.ready = True
        self.last_error = None
        return SchemaStatus(ok=True)

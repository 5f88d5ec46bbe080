# sitevisits/services/visits.py
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine

from sitevisits.core.config import Settings
from sitevisits.core.db import create_engine_from_settings, create_session_factory
from sitevisits.services.aggregator import VisitAggregator
from sitevisits.services.recorder import VisitRecorder
from sitevisits.services.schema import SchemaInitializer

logger = logging.getLogger(__name__)


class VisitsContext:
    """
    Все состояние подсистемы визитов в одном объекте: движок, инициализатор схемы,
    рекордер и агрегатор. Живет в app.state, глобальных переменных нет.
    Без движка фича выключена: recorder и aggregator равны None.
    """

    def __init__(self, engine: Optional[AsyncEngine], queue_size: int = 1000):
        self.engine = engine
        self.schema = SchemaInitializer(engine)
        self.recorder: Optional[VisitRecorder] = None
        self.aggregator: Optional[VisitAggregator] = None

        if engine is not None:
            session_factory = create_session_factory(engine)
            self.recorder = VisitRecorder(session_factory, self.schema, maxsize=queue_size)
            self.aggregator = VisitAggregator(session_factory, self.schema)

    @classmethod
    def from_settings(cls, settings: Settings) -> "VisitsContext":
        return cls(create_engine_from_settings(settings), queue_size=settings.VISIT_QUEUE_SIZE)

    @property
    def enabled(self) -> bool:
        return self.engine is not None

    async def close(self):
        if self.recorder is not None:
            await self.recorder.stop()
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database engine disposed.")

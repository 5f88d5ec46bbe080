# sitevisits/services/recorder.py
import asyncio
import logging
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitevisits.models.visit import Visit, MAX_PATH_LENGTH
from sitevisits.services.schema import SchemaInitializer

logger = logging.getLogger(__name__)


class VisitRecorder:
    """
    Fire-and-forget запись визитов.

    record() только кладет визит в очередь и сразу возвращается, ответ пользователю
    не ждет базу. Фоновый воркер разгребает очередь; ошибки вставки не
    повторяются и не доходят до клиента, они лишь логируются и считаются в `failed`.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        schema: SchemaInitializer,
        maxsize: int = 1000,
    ):
        self._session_factory = session_factory
        self._schema = schema
        self._queue: asyncio.Queue[Tuple[str, str]] = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None
        self.recorded = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._worker(), name="visit-recorder")
        logger.info("Visit recorder worker started.")

    def record(self, visitor_id: str, path: str) -> None:
        self.start()
        try:
            self._queue.put_nowait((visitor_id, (path or "/")[:MAX_PATH_LENGTH]))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Visit queue is full, dropping visit for path '{path[:64]}'")

    async def drain(self) -> None:
        """Ждет, пока все поставленные в очередь визиты будут обработаны."""
        if not self.running:
            return
        await self._queue.join()

    async def stop(self) -> None:
        await self.drain()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info(
                f"Visit recorder stopped: recorded={self.recorded}, failed={self.failed}, dropped={self.dropped}"
            )

    async def _worker(self) -> None:
        while True:
            visitor_id, path = await self._queue.get()
            try:
                await self._insert(visitor_id, path)
                self.recorded += 1
            except Exception as e:
                self.failed += 1
                logger.warning(f"Failed to record visit: {e}")
            finally:
                self._queue.task_done()

    async def _insert(self, visitor_id: str, path: str) -> None:
        status = await self._schema.ensure()
        if not status.ok:
            raise RuntimeError(f"visits table unavailable: {status.reason}")

        async with self._session_factory() as session:
            session.add(Visit(visitor_id=visitor_id, path=path))
            await session.commit()

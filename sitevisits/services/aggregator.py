# sitevisits/services/aggregator.py
import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple
from sqlalchemy import select, func, distinct, literal_column
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitevisits.models.visit import Visit
from sitevisits.models.stats import SeriesPoint, VisitStats, WindowStats
from sitevisits.services.schema import SchemaInitializer

logger = logging.getLogger(__name__)

DEFAULT_SERIES_DAYS = 30
MAX_SERIES_DAYS = 365

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_days(raw) -> int:
    """
    Количество дней для временного ряда из query-параметра.
    Берется ведущее целое ('12abc' -> 12); пусто, мусор или 0 -> 30; затем clamp в [1, 365].
    """
    days = 0
    if raw is not None:
        match = _LEADING_INT_RE.match(str(raw))
        if match:
            days = int(match.group(1))
    if not days:
        days = DEFAULT_SERIES_DAYS
    return max(1, min(MAX_SERIES_DAYS, days))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_day(column, dialect_name: str):
    """Календарный день (UTC) для колонки timestamptz."""
    if dialect_name == "postgresql":
        # date(ts) в Postgres зависит от TimeZone сессии
        return func.date(func.timezone(literal_column("'UTC'"), column))
    # SQLite хранит время строкой в UTC
    return func.date(column)


def _as_date(value) -> date:
    # Postgres отдает date, SQLite отдает строку 'YYYY-MM-DD'
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class VisitAggregator:
    """Оконная статистика и дневной ряд по таблице visits. Границы суток считаются в UTC."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        schema: SchemaInitializer,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._schema = schema
        self._clock = clock

    async def _require_schema(self):
        status = await self._schema.ensure()
        if not status.ok:
            raise RuntimeError(f"visits table unavailable: {status.reason}")

    async def _window(self, session: AsyncSession, since: Optional[datetime]) -> WindowStats:
        query = select(
            func.count().label("page_views"),
            func.count(distinct(Visit.visitor_id)).label("unique_visitors"),
        ).select_from(Visit)
        if since is not None:
            query = query.where(Visit.ts >= since)

        row = (await session.execute(query)).one()
        return WindowStats(page_views=int(row.page_views or 0), unique_visitors=int(row.unique_visitors or 0))

    async def stats(self) -> VisitStats:
        await self._require_schema()

        now = self._clock()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

        # Четыре независимых запроса; при конкурентной записи вложенность окон может
        # ненадолго нарушиться, это допустимо
        async with self._session_factory() as session:
            return VisitStats(
                today=await self._window(session, today_start),
                d7=await self._window(session, now - timedelta(days=7)),
                d30=await self._window(session, now - timedelta(days=30)),
                all=await self._window(session, None),
            )

    async def time_series(self, days: int = DEFAULT_SERIES_DAYS) -> List[SeriesPoint]:
        await self._require_schema()

        days = max(1, min(MAX_SERIES_DAYS, int(days or DEFAULT_SERIES_DAYS)))
        today_start = self._clock().replace(hour=0, minute=0, second=0, microsecond=0)
        start = today_start - timedelta(days=days - 1)

        async with self._session_factory() as session:
            day_col = utc_day(Visit.ts, session.get_bind().dialect.name)
            query = (
                select(
                    day_col.label("day"),
                    func.count().label("page_views"),
                    func.count(distinct(Visit.visitor_id)).label("unique_visitors"),
                )
                .where(Visit.ts >= start)
                .group_by(day_col)
            )
            rows = (await session.execute(query)).all()

        activity: Dict[date, Tuple[int, int]] = {
            _as_date(row.day): (int(row.page_views or 0), int(row.unique_visitors or 0)) for row in rows
        }

        # Полный ряд без пропусков, чтобы график не "склеивал" пустые дни
        series = []
        first_day = start.date()
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            page_views, unique_visitors = activity.get(day, (0, 0))
            series.append(SeriesPoint(day=day, page_views=page_views, unique_visitors=unique_visitors))
        return series

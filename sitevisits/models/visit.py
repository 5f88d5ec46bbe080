# sitevisits/models/visit.py
from sqlalchemy import Column, BigInteger, Integer, Text, DateTime, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# Максимальная длина сохраняемого пути, длиннее обрезается
MAX_PATH_LENGTH = 512


class Visit(Base):
    __tablename__ = "visits"

    # BIGSERIAL в Postgres; в SQLite автоинкремент работает только у INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    ts = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    visitor_id = Column(Text, nullable=False)
    path = Column(Text, nullable=True)

    __table_args__ = (
        Index("visits_ts_idx", "ts"),
        Index("visits_visitor_ts_idx", "visitor_id", "ts"),
    )

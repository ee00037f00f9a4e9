"""
SQLAlchemy ORM models for the SnapTrade application.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Analysis(Base):
    __tablename__ = "analyses"
    __table_args__ = (
        Index("idx_analyses_timestamp", text("timestamp DESC")),
        Index("idx_analyses_asset", "asset"),
    )

    id = Column(Integer, primary_key=True)
    asset = Column(String(50), nullable=False)
    image_url = Column(Text, nullable=False)  # data:image/jpeg;base64,...
    patterns = Column(JSONB, nullable=False, server_default=text("'[]'::jsonb"))
    news_sentiment = Column(JSONB, nullable=False)
    prediction = Column(JSONB, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class NamedAnalysis(Base):
    __tablename__ = "named_analyses"
    __table_args__ = (Index("idx_named_analyses_timestamp", text("timestamp DESC")),)

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    notes = Column(Text)
    result = Column(JSONB, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

"""SQLAlchemy models for persisted intelligence runs."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""


# =============================================================================
# Intelligence Runs
# =============================================================================


class IntelligenceRun(Base):
    """One recommendation computation, written once and never updated.

    ``top_results`` holds the published ranked results exactly as they
    were returned at creation time, so reads never depend on the current
    catalog or scoring formulas.
    """

    __tablename__ = "intelligence_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Normalized query
    intended_use: Mapped[str] = mapped_column(String(50), nullable=False)
    budget_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    battery_preference: Mapped[str] = mapped_column(String(50), nullable=False)
    size_constraint: Mapped[str] = mapped_column(String(50), nullable=False)

    algorithm_version: Mapped[str] = mapped_column(String(50), nullable=False)
    result_limit: Mapped[int] = mapped_column(Integer, nullable=False)

    # sha256 of normalized query + algorithm version
    query_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)

    top_results: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_intelligence_runs_fingerprint", "query_fingerprint"),
        Index("ix_intelligence_runs_created_at", "created_at"),
        # ids are never handed out twice, even after deletes
        {"sqlite_autoincrement": True},
    )

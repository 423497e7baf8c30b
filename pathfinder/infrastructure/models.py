# pathfinder/infrastructure/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Float, ForeignKey, Index, Integer, String,
    Text, TIMESTAMP, UniqueConstraint, text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserORM(Base):
    __tablename__ = "users"
    # deleted ids are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default="user")
    profile: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    assessments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    assessment_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    skills_progress: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r})"


class LearningPathORM(Base):
    __tablename__ = "learning_paths"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    modules: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="not_started")
    progress: Mapped[int] = mapped_column(Integer, default=0)
    current_day: Mapped[int] = mapped_column(Integer, default=1)
    total_days: Mapped[int] = mapped_column(Integer, default=30)
    is_ai_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_path_progress_range"),
    )

    def __repr__(self) -> str:
        return f"LearningPathORM(id={self.id!r}, title={self.title!r})"


class ProgressORM(Base):
    __tablename__ = "progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    learning_path_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_day: Mapped[int] = mapped_column(Integer, default=1)
    total_days: Mapped[int] = mapped_column(Integer, default=1)
    completed_tasks: Mapped[dict[str, Any]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), default=dict)
    overall_progress: Mapped[float] = mapped_column(Float, default=0)
    state: Mapped[str] = mapped_column(String(32), default="incomplete")
    time_spent: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    # legacy per-task keying
    task_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    task_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "learning_path_id", name="uq_progress_user_path"),
        UniqueConstraint("user_id", "task_id", name="uq_progress_user_task"),
        CheckConstraint("overall_progress >= 0 AND overall_progress <= 100", name="ck_progress_range"),
    )


class CertificateORM(Base):
    __tablename__ = "certificates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    certificate_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    # issued certificates outlive the account and stay verifiable
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    domain: Mapped[str] = mapped_column(String(255), nullable=False)
    user_info: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    course_details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    verification: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    download_count: Mapped[int] = mapped_column(Integer, default=0)
    last_downloaded: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    is_revoked: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (
        # at most one live certificate per (user, domain)
        Index(
            "uq_certificate_user_domain_active",
            "user_id",
            "domain",
            unique=True,
            sqlite_where=text("is_revoked = 0"),
            postgresql_where=text("is_revoked = false"),
        ),
    )

    def __repr__(self) -> str:
        return f"CertificateORM(certificate_id={self.certificate_id!r}, domain={self.domain!r})"


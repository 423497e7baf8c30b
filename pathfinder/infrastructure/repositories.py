from datetime import datetime
from typing import Any

from sqlalchemy import case, delete, func, literal_column, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import CertificateORM, LearningPathORM, ProgressORM, UserORM, utcnow
from ..application.dto import CertificateBundle, UserInfo
from ..application.use_cases.delete_account import IOwnedRecords, IUserStore
from ..application.use_cases.issue_certificate import CertificateIdCollision, ICertificateRepository
from ..application.use_cases.register_user import IUserRepository
from ..domain.entities import User


def to_domain(u: UserORM) -> User:
    return User(id=u.id, name=u.name, email=u.email, role=u.role)


def _insert_for(db: Session):
    """Dialect ``insert`` that supports ON CONFLICT."""
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"upsert not supported on {name}")


class _OwnedDelete(IOwnedRecords):
    model: Any = None

    def __init__(self, db: Session): self.db = db

    def delete_for_user(self, user_id: int) -> int:
        try:
            result = self.db.execute(delete(self.model).where(self.model.user_id == user_id))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return result.rowcount


class UserRepository(IUserRepository, IUserStore):
    def __init__(self, db: Session): self.db = db

    def get_by_email(self, email: str) -> User | None:
        row = self.db.query(UserORM).filter(UserORM.email == email.lower()).first()
        return to_domain(row) if row else None

    def get_row(self, user_id: int) -> UserORM | None:
        return self.db.get(UserORM, user_id)

    def create(self, name: str, email: str, password_hash: str, role: str = "user") -> User:
        row = UserORM(name=name, email=email, password_hash=password_hash, role=role,
                      profile={"skills": [], "experience": "beginner", "goals": []})
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return to_domain(row)

    def save(self, row: UserORM) -> UserORM:
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return row

    def delete(self, user_id: int) -> bool:
        row = self.db.get(UserORM, user_id)
        if not row:
            return False
        self.db.delete(row); self.db.commit()
        return True


class LearningPathRepository(_OwnedDelete):
    model = LearningPathORM

    def list_for(self, user_id: int, completed_only: bool = False) -> list[LearningPathORM]:
        q = select(LearningPathORM).where(LearningPathORM.user_id == user_id)
        if completed_only:
            q = q.where(LearningPathORM.is_completed.is_(True))
        q = q.order_by(LearningPathORM.created_at.desc(), LearningPathORM.id.desc())
        return list(self.db.scalars(q))

    def get(self, path_id: int) -> LearningPathORM | None:
        return self.db.get(LearningPathORM, path_id)

    def add(self, row: LearningPathORM) -> LearningPathORM:
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return row

    def save(self, row: LearningPathORM) -> LearningPathORM:
        return self.add(row)

    def remove(self, row: LearningPathORM) -> None:
        self.db.delete(row); self.db.commit()


class ProgressRepository(_OwnedDelete):
    """Canonical records are keyed by (user, learning path); legacy ones by (user, task)."""

    model = ProgressORM

    def list_for(self, user_id: int) -> list[ProgressORM]:
        q = (select(ProgressORM)
             .where(ProgressORM.user_id == user_id)
             .order_by(ProgressORM.updated_at.desc(), ProgressORM.id.desc()))
        return list(self.db.scalars(q))

    def get_for_path(self, user_id: int, learning_path_id: str) -> ProgressORM | None:
        q = select(ProgressORM).where(
            ProgressORM.user_id == user_id,
            ProgressORM.learning_path_id == learning_path_id,
        )
        return self.db.scalars(q).first()

    def legacy_tasks(self, user_id: int, domain: str | None = None) -> list[ProgressORM]:
        q = select(ProgressORM).where(
            ProgressORM.user_id == user_id,
            ProgressORM.learning_path_id.is_(None),
            ProgressORM.task_id.is_not(None),
        )
        if domain:
            q = q.where(ProgressORM.domain == domain)
        return list(self.db.scalars(q.order_by(ProgressORM.day, ProgressORM.task_index)))

    def upsert_path(self, user_id: int, learning_path_id: str, values: dict) -> ProgressORM:
        """Create-or-update in one statement on (user_id, learning_path_id)."""
        now = utcnow()
        insert = _insert_for(self.db)
        stmt = insert(ProgressORM).values(
            user_id=user_id,
            learning_path_id=learning_path_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "learning_path_id"],
            set_={**values, "updated_at": now},
        )
        self.db.execute(stmt)
        self.db.commit()
        row = self.get_for_path(user_id, learning_path_id)
        self.db.refresh(row)
        return row

    def _merged_tasks(self, incoming):
        current = ProgressORM.completed_tasks
        if self.db.get_bind().dialect.name == "postgresql":
            return func.coalesce(current, literal_column("'{}'::jsonb")).op("||")(incoming)
        return func.json_patch(func.coalesce(current, literal_column("'{}'")), incoming)

    def merge_task(self, user_id: int, learning_path_id: str, task_id: str, entry: dict,
                   domain: str | None = None, day: int | None = None) -> ProgressORM:
        """Add one task to the canonical map inside the upsert itself.

        Concurrent completions on the same record each keep their task, and
        ``current_day`` only moves forward.
        """
        now = utcnow()
        insert = _insert_for(self.db)
        values = {"completed_tasks": {task_id: entry}, "current_day": day or 1}
        if domain:
            values["domain"] = domain
        stmt = insert(ProgressORM).values(
            user_id=user_id,
            learning_path_id=learning_path_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        excluded = stmt.excluded
        set_ = {
            "completed_tasks": self._merged_tasks(excluded.completed_tasks),
            "current_day": case(
                (excluded.current_day > func.coalesce(ProgressORM.current_day, 1), excluded.current_day),
                else_=ProgressORM.current_day,
            ),
            "updated_at": now,
        }
        if domain:
            set_["domain"] = domain
        stmt = stmt.on_conflict_do_update(index_elements=["user_id", "learning_path_id"], set_=set_)
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        row = self.get_for_path(user_id, learning_path_id)
        self.db.refresh(row)
        return row

    def upsert_task(self, user_id: int, task_id: str, values: dict) -> ProgressORM:
        now = utcnow()
        insert = _insert_for(self.db)
        stmt = insert(ProgressORM).values(user_id=user_id, task_id=task_id,
                                          created_at=now, updated_at=now, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "task_id"],
            set_={**values, "updated_at": now},
        )
        self.db.execute(stmt)
        self.db.commit()
        q = select(ProgressORM).where(ProgressORM.user_id == user_id, ProgressORM.task_id == task_id)
        row = self.db.scalars(q).one()
        self.db.refresh(row)
        return row


class CertificateRepository(ICertificateRepository):
    def __init__(self, db: Session): self.db = db

    def find_active(self, user_id: int, domain: str) -> CertificateORM | None:
        q = select(CertificateORM).where(
            CertificateORM.user_id == user_id,
            CertificateORM.domain == domain,
            CertificateORM.is_revoked.is_(False),
        )
        return self.db.scalars(q).first()

    def add(self, user_id: int, bundle: CertificateBundle, user_info: UserInfo, course_details: dict) -> CertificateORM:
        row = CertificateORM(
            certificate_id=bundle.certificate_id,
            user_id=user_id,
            domain=course_details["domain"],
            user_info={"name": user_info.name, "email": user_info.email},
            course_details=course_details,
            content=bundle.content,
            verification=bundle.verification,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise CertificateIdCollision(str(exc.orig)) from exc
        self.db.refresh(row)
        return row

    def list_for(self, user_id: int) -> list[CertificateORM]:
        q = (select(CertificateORM)
             .where(CertificateORM.user_id == user_id, CertificateORM.is_revoked.is_(False))
             .order_by(CertificateORM.created_at.desc(), CertificateORM.id.desc()))
        return list(self.db.scalars(q))

    def get_owned(self, certificate_id: str, user_id: int) -> CertificateORM | None:
        q = select(CertificateORM).where(
            CertificateORM.certificate_id == certificate_id,
            CertificateORM.user_id == user_id,
            CertificateORM.is_revoked.is_(False),
        )
        return self.db.scalars(q).first()

    def get_active(self, certificate_id: str) -> CertificateORM | None:
        q = select(CertificateORM).where(
            CertificateORM.certificate_id == certificate_id,
            CertificateORM.is_revoked.is_(False),
        )
        return self.db.scalars(q).first()

    def record_download(self, row: CertificateORM, when: datetime | None = None) -> CertificateORM:
        row.download_count = (row.download_count or 0) + 1
        row.last_downloaded = when or utcnow()
        self.db.commit(); self.db.refresh(row)
        return row

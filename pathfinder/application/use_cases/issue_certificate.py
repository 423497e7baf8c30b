from datetime import datetime, timedelta, timezone

import structlog

from ..certificates import compose_certificate
from ..dto import CertificateBundle, CourseDetails, UserInfo
from ...infrastructure.metrics import certificates_issued_total

logger = structlog.get_logger(__name__)

MAX_ID_ATTEMPTS = 3


class CertificateExistsError(ValueError):
    def __init__(self, certificate_id: str):
        super().__init__("Certificate already exists for this domain")
        self.certificate_id = certificate_id


class CertificateIdCollision(Exception):
    """Insert failed on the certificate-id unique index."""


class ICertificateRepository:
    def find_active(self, user_id: int, domain: str): ...
    def add(self, user_id: int, bundle: CertificateBundle, user_info: UserInfo, course_details: dict): ...


class IssueCertificate:
    def __init__(self, repo: ICertificateRepository, base_url: str, secret: str | None = None):
        self.repo = repo
        self.base_url = base_url
        self.secret = secret

    def _check_existing(self, user_id: int, domain: str) -> None:
        existing = self.repo.find_active(user_id, domain)
        if existing:
            raise CertificateExistsError(existing.certificate_id)

    def execute(self, user_id: int, user_info: UserInfo, course: CourseDetails, now: datetime | None = None):
        self._check_existing(user_id, course.domain)
        now = now or datetime.now(timezone.utc)
        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            bundle = compose_certificate(user_info, course, self.base_url, secret=self.secret, now=now)
            details = {
                "domain": course.domain,
                "skills": list(course.skills),
                "level": course.level,
                "startDate": (now - timedelta(days=course.duration)).isoformat(),
                "completionDate": bundle.verification["issuedDate"],
                "duration": course.duration,
                "tasksCompleted": course.tasks_completed if course.tasks_completed is not None else len(course.skills),
                "totalTasks": max(course.total_tasks or len(course.skills) or 1, 1),
                "completionRate": bundle.completion_rate,
            }
            try:
                row = self.repo.add(user_id, bundle, user_info, details)
            except CertificateIdCollision:
                # a concurrent request may have won the (user, domain) race instead
                self._check_existing(user_id, course.domain)
                logger.warning("certificate_id_collision", certificate_id=bundle.certificate_id, attempt=attempt)
                continue
            certificates_issued_total.inc()
            logger.info("certificate_issued", user_id=user_id, domain=course.domain,
                        certificate_id=row.certificate_id)
            return row
        raise RuntimeError("Could not allocate a unique certificate id")

from dataclasses import dataclass

@dataclass(frozen=True)
class UserInfo:
    name: str
    email: str

@dataclass
class CourseDetails:
    domain: str
    skills: list[str]
    level: str = "Intermediate"
    tasks_completed: int | None = None
    total_tasks: int | None = None
    duration: int = 30

@dataclass
class CertificateBundle:
    certificate_id: str
    content: str
    verification: dict
    completion_rate: int

@dataclass
class VerificationResult:
    is_valid: bool
    message: str
    verified_at: str | None = None

    def to_dict(self) -> dict:
        data = {"isValid": self.is_valid, "message": self.message}
        if self.verified_at:
            data["verifiedAt"] = self.verified_at
        return data

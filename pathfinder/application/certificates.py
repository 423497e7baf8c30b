"""Certificate composition and verification.

Certificate IDs are ``CERT-<epoch millis>-<9 uppercase base36 chars>``. They
are unique with overwhelming probability, not by construction; the store
keeps a unique index on them and the issuing use case retries on collision.

Verification compares the requested ID with the stored verification record.
Records issued with a secret also carry an HMAC-SHA256 signature over the
course snapshot, which is checked when a secret is supplied.
"""
import hashlib
import hmac
import html
import secrets
import string
from datetime import datetime, timezone

from .dto import CertificateBundle, CourseDetails, UserInfo, VerificationResult
from ..domain.scoring import completion_rate

ID_ALPHABET = string.digits + string.ascii_uppercase
ID_SUFFIX_LENGTH = 9


class ImageRenderError(Exception):
    """The headless browser could not rasterise a certificate."""


class IImageRenderer:
    def render(self, html: str) -> bytes: ...


def generate_certificate_id(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"CERT-{millis}-{suffix}"


def verification_url(base_url: str, certificate_id: str) -> str:
    return f"{base_url.rstrip('/')}/verify-certificate/{certificate_id}"


def sign_verification(record: dict, secret: str) -> str:
    message = "|".join([
        str(record.get("certificateId", "")),
        str(record.get("domain", "")),
        ",".join(str(s) for s in record.get("skills") or []),
        str(record.get("completionRate", "")),
    ])
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def _issue_date(now: datetime) -> str:
    return f"{now:%B} {now.day}, {now.year}"


CERTIFICATE_TEMPLATE = string.Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Certificate of Achievement</title>
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Cormorant+Garamond:wght@400;600;700&family=Montserrat:wght@300;400;500;600;700&display=swap');
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: 'Montserrat', sans-serif;
            background: linear-gradient(135deg, #1e3c72 0%, #2a5298 50%, #1e3c72 100%);
            padding: 20px;
            display: flex;
            align-items: center;
            justify-content: center;
            width: 210mm;
            min-height: 297mm;
        }
        .certificate-container {
            background: linear-gradient(145deg, #ffffff 0%, #f8fafc 100%);
            border-radius: 15px;
            padding: 40px;
            box-shadow: 0 25px 50px rgba(0, 0, 0, 0.2);
            width: 190mm;
            min-height: 270mm;
            position: relative;
            display: flex;
            flex-direction: column;
            justify-content: center;
            align-items: center;
            text-align: center;
        }
        .certificate-container::after {
            content: '';
            position: absolute;
            top: 25px; left: 25px; right: 25px; bottom: 25px;
            border: 2px solid #e5b429;
            border-radius: 15px;
            pointer-events: none;
        }
        .institution-logo {
            width: 80px; height: 80px;
            border-radius: 50%;
            background: radial-gradient(circle, #ffd700 0%, #e5b429 70%, #b8860b 100%);
            color: #fff;
            font-weight: 700;
            font-size: 1.6rem;
            line-height: 80px;
            margin: 0 auto 12px;
        }
        .institution-name { font-size: 1.2rem; font-weight: 600; color: #1e3c72; letter-spacing: 2px; }
        .institution-tagline { font-size: 0.85rem; color: #64748b; margin-bottom: 24px; }
        .certificate-title { font-family: 'Cormorant Garamond', serif; font-size: 3rem; color: #1e293b; }
        .certificate-subtitle { color: #64748b; margin: 8px 0 28px; }
        .presented-to { color: #475569; font-size: 1rem; }
        .recipient-name { font-family: 'Cormorant Garamond', serif; font-size: 2.6rem; color: #b8860b; margin: 8px 0; }
        .recipient-email { color: #64748b; font-size: 0.9rem; margin-bottom: 24px; }
        .achievement-text { color: #334155; line-height: 1.7; }
        .domain-highlight { font-weight: 700; color: #1e3c72; font-size: 1.4rem; }
        .level-badge {
            display: inline-block;
            margin: 14px 0 24px;
            padding: 6px 18px;
            border-radius: 20px;
            background: #1e3c72;
            color: #fff;
            font-size: 0.85rem;
            letter-spacing: 1px;
        }
        .skills-title { font-size: 1rem; color: #1e293b; margin-bottom: 10px; }
        .skills-grid { display: flex; flex-wrap: wrap; gap: 8px; justify-content: center; margin-bottom: 24px; }
        .skill-badge {
            padding: 4px 12px;
            border: 1px solid #e5b429;
            border-radius: 12px;
            font-size: 0.8rem;
            color: #475569;
        }
        .completion-stats {
            display: grid;
            grid-template-columns: repeat(4, 1fr);
            gap: 12px;
            width: 100%;
            margin-bottom: 28px;
        }
        .stat-item { background: #f1f5f9; border-radius: 10px; padding: 12px 6px; }
        .stat-label { font-size: 0.7rem; color: #64748b; text-transform: uppercase; letter-spacing: 1px; }
        .stat-value { font-size: 1.2rem; font-weight: 700; color: #1e293b; margin-top: 4px; }
        .completion-rate { color: #16a34a; }
        .certificate-footer { font-size: 0.8rem; color: #64748b; line-height: 1.8; }
        .verification-link { color: #2a5298; text-decoration: none; font-weight: 600; }
        @page { size: A4; margin: 5mm; }
    </style>
</head>
<body>
    <div class="certificate-container">
        <div class="header">
            <div class="institution-logo">LPF</div>
            <div class="institution-name">Learning Path Finder Academy</div>
            <div class="institution-tagline">Excellence in Professional Development</div>
            <h1 class="certificate-title">Certificate of Completion</h1>
            <p class="certificate-subtitle">This certifies the successful completion of a comprehensive learning program</p>
        </div>

        <div class="recipient-section">
            <p class="presented-to">This certificate is proudly presented to</p>
            <h2 class="recipient-name">$name</h2>
            <p class="recipient-email">$email</p>
        </div>

        <div class="achievement-section">
            <p class="achievement-text">
                For successfully completing the comprehensive learning path in<br>
                <span class="domain-highlight">$domain</span>
            </p>
            <div class="level-badge">$level Level</div>
        </div>

        <div class="skills-section">
            <h3 class="skills-title">Skills Mastered</h3>
            <div class="skills-grid">$skills</div>
        </div>

        <div class="completion-stats">
            <div class="stat-item">
                <div class="stat-label">Completion Rate</div>
                <div class="stat-value completion-rate">$rate%</div>
            </div>
            <div class="stat-item">
                <div class="stat-label">Duration</div>
                <div class="stat-value">$duration Days</div>
            </div>
            <div class="stat-item">
                <div class="stat-label">Tasks Completed</div>
                <div class="stat-value">$tasks_completed/$total_tasks</div>
            </div>
            <div class="stat-item">
                <div class="stat-label">Achievement Level</div>
                <div class="stat-value">$level</div>
            </div>
        </div>

        <div class="certificate-footer">
            <div class="certificate-id">Certificate ID: $certificate_id</div>
            <div class="issue-date">Issued on: $issued_on</div>
            <a href="$verification_url" class="verification-link" target="_blank">Verify Certificate Online</a>
        </div>
    </div>
</body>
</html>""")


def render_certificate_html(
    user_info: UserInfo,
    course: CourseDetails,
    certificate_id: str,
    rate: int,
    tasks_completed: int,
    total_tasks: int,
    verify_url: str,
    issued_at: datetime,
) -> str:
    esc = html.escape
    skills = "".join(f'<span class="skill-badge">{esc(str(skill))}</span>' for skill in course.skills)
    return CERTIFICATE_TEMPLATE.substitute(
        name=esc(user_info.name),
        email=esc(user_info.email),
        domain=esc(course.domain),
        level=esc(course.level),
        skills=skills,
        rate=rate,
        duration=course.duration,
        tasks_completed=tasks_completed,
        total_tasks=total_tasks,
        certificate_id=certificate_id,
        issued_on=_issue_date(issued_at),
        verification_url=esc(verify_url, quote=True),
    )


def compose_certificate(
    user_info: UserInfo,
    course: CourseDetails,
    base_url: str,
    secret: str | None = None,
    now: datetime | None = None,
) -> CertificateBundle:
    """Build ID, HTML content and verification record. Persists nothing."""
    now = now or datetime.now(timezone.utc)
    certificate_id = generate_certificate_id(now)
    skills_count = len(course.skills)
    total_tasks = max(course.total_tasks or skills_count or 1, 1)
    tasks_completed = course.tasks_completed if course.tasks_completed is not None else skills_count
    rate = completion_rate(tasks_completed, total_tasks, skills_count)
    verify_url = verification_url(base_url, certificate_id)

    content = render_certificate_html(
        user_info, course, certificate_id, rate, tasks_completed, total_tasks, verify_url, now
    )
    verification = {
        "certificateId": certificate_id,
        "issuedDate": now.isoformat(),
        "verificationUrl": verify_url,
        "skills": list(course.skills),
        "domain": course.domain,
        "completionRate": rate,
    }
    if secret:
        verification["signature"] = sign_verification(verification, secret)
    return CertificateBundle(
        certificate_id=certificate_id,
        content=content,
        verification=verification,
        completion_rate=rate,
    )


def verify_certificate(
    certificate_id: str | None,
    record: dict | None,
    secret: str | None = None,
) -> VerificationResult:
    if not certificate_id or not record:
        return VerificationResult(is_valid=False, message="Invalid certificate data")
    if certificate_id != record.get("certificateId"):
        return VerificationResult(is_valid=False, message="Certificate ID mismatch")
    signature = record.get("signature")
    if signature and secret:
        expected = sign_verification(record, secret)
        if not hmac.compare_digest(str(signature), expected):
            return VerificationResult(is_valid=False, message="Certificate signature mismatch")
    return VerificationResult(
        is_valid=True,
        message="Certificate is valid and authentic",
        verified_at=datetime.now(timezone.utc).isoformat(),
    )

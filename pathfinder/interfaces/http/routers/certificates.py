import math

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ....application.certificates import IImageRenderer, ImageRenderError, verify_certificate
from ....application.dto import CourseDetails, UserInfo
from ....application.use_cases.issue_certificate import CertificateExistsError, IssueCertificate
from ....config import settings
from ....infrastructure.db import get_db
from ....infrastructure.metrics import certificate_renders_total
from ....infrastructure.models import UserORM
from ....infrastructure.repositories import CertificateRepository
from ..authz import get_current_user, get_current_user_id
from ..dependencies import get_image_renderer
from ..schemas import GenerateCertificateReq
from ..serializers import certificate_to_dict

router = APIRouter(prefix="/api/certificates", tags=["certificates"])
logger = structlog.get_logger(__name__)

@router.post("/generate", status_code=status.HTTP_201_CREATED)
def generate_certificate(
    payload: GenerateCertificateReq,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    course = CourseDetails(
        domain=payload.domain,
        skills=list(payload.skills),
        level=payload.level or "Intermediate",
        tasks_completed=math.floor(len(payload.skills) * payload.completion_rate / 100),
        total_tasks=len(payload.skills),
    )
    uc = IssueCertificate(CertificateRepository(db), base_url=settings.API_URL, secret=settings.SECRET_KEY)
    try:
        row = uc.execute(user.id, UserInfo(name=user.name, email=user.email), course)
    except CertificateExistsError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": str(e), "certificateId": e.certificate_id},
        )
    return {
        "success": True,
        "message": "Certificate generated successfully",
        "certificate": certificate_to_dict(row),
    }

@router.get("")
def list_certificates(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    rows = CertificateRepository(db).list_for(user_id)
    return {"success": True, "certificates": [certificate_to_dict(r, include_content=False) for r in rows]}

@router.get("/verify/{certificate_id}")
def verify(certificate_id: str, db: Session = Depends(get_db)):
    row = CertificateRepository(db).get_active(certificate_id)
    if not row:
        raise HTTPException(status_code=404, detail="Certificate not found or has been revoked")
    result = verify_certificate(certificate_id, row.verification, secret=settings.SECRET_KEY)
    logger.info("certificate_verified", certificate_id=certificate_id, valid=result.is_valid)
    data = certificate_to_dict(row, include_content=False)
    return {
        "success": True,
        "verified": result.is_valid,
        "certificate": {
            "certificateId": data["certificateId"],
            "userInfo": data["userInfo"],
            "courseDetails": data["courseDetails"],
            "verification": data["verification"],
            "issuedDate": data["createdAt"],
        },
        "verificationDetails": result.to_dict(),
    }

@router.get("/{certificate_id}")
def get_certificate(
    certificate_id: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = CertificateRepository(db)
    row = repo.get_owned(certificate_id, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Certificate not found")
    repo.record_download(row)
    return {"success": True, "certificate": certificate_to_dict(row)}

@router.get("/{certificate_id}/image")
def download_image(
    certificate_id: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    renderer: IImageRenderer = Depends(get_image_renderer),
):
    repo = CertificateRepository(db)
    row = repo.get_owned(certificate_id, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Certificate not found")
    try:
        image = renderer.render(row.content)
    except ImageRenderError as exc:
        certificate_renders_total.labels(outcome="error").inc()
        logger.error("certificate_render_failed", certificate_id=certificate_id, error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to generate certificate image")
    certificate_renders_total.labels(outcome="ok").inc()
    repo.record_download(row)
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="certificate-{certificate_id}.png"'},
    )

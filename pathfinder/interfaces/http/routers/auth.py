import structlog
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from ....infrastructure.db import get_db
from ....infrastructure.models import UserORM
from ....infrastructure.ratelimit import limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ....application.use_cases.register_user import RegisterUser
from ....config import settings
from ..authz import get_current_user
from ..schemas import RegisterReq, LoginReq, UserResp, TokenResp

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = structlog.get_logger(__name__)

def _user_resp(row) -> UserResp:
    return UserResp(id=row.id, name=row.name, email=row.email, role=row.role, profile=row.profile or {})

@router.post("/register", response_model=TokenResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
def register(request: Request, payload: RegisterReq, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    uc = RegisterUser(repo=repo, hasher=PasswordHasher())
    try:
        user = uc.execute(payload.name, payload.email, payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("user_registered", user_id=user.id)
    token = create_access_token(user.id, role=user.role)
    return TokenResp(access_token=token, user=_user_resp(repo.get_row(user.id)))

@router.post("/login", response_model=TokenResp)
@limiter.limit("10/minute")
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    row = db.query(UserORM).filter(UserORM.email == payload.email.lower()).first()
    if not row or not PasswordHasher().verify(payload.password, row.password_hash):
        logger.info("login_failed", email=payload.email.lower())
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(row.id, role=row.role)
    return TokenResp(access_token=token, user=_user_resp(row))

@router.get("/me")
def me(user: UserORM = Depends(get_current_user)):
    return {"success": True, "user": _user_resp(user).model_dump()}

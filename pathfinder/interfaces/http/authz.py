from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from ...infrastructure.db import get_db
from ...infrastructure.models import UserORM
from ...infrastructure.security import decode_token

bearer = HTTPBearer()

def get_current_user_id(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> int:
    try:
        return decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UserORM:
    row = db.get(UserORM, user_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return row

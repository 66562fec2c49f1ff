# services/auth_service.py
import logging
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from models import get_async_session, User, UserRole
from config_reader import config

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 # 1 день


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Створює JWT-токен."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.jwt_secret_key.get_secret_value(), algorithm=config.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """Декодує та валідує JWT-токен."""
    try:
        return jwt.decode(token, config.jwt_secret_key.get_secret_value(), algorithms=[config.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Помилка валідації JWT-токену: {e}")
        return None


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None: raise credentials_exception
    user_id_str = payload.get("sub")
    if user_id_str is None: raise credentials_exception
    try:
        user_id = int(user_id_str)
    except ValueError:
        raise credentials_exception
    user = await db.get(User, user_id)
    if user is None: raise credentials_exception
    return user


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Доступ ТІЛЬКИ для адміна (синхронізація, видалення товарів)."""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user

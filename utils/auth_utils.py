import os, bcrypt, jwt
import logging
from datetime import datetime, timedelta
from fastapi import Header, HTTPException
from sqlalchemy.orm import Session
from dotenv import load_dotenv

from db import get_db
from models.models_user import User
from models.schemas_user import UserOut

load_dotenv()

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
JWT_ALG = "HS256"
JWT_EXP_DAYS = int(os.getenv("JWT_EXP_DAYS", "7"))

def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt()).decode()

def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode(), hashed.encode())
    except ValueError:
        return False

def create_token(sub: str, expires_delta: timedelta = timedelta(days=JWT_EXP_DAYS)) -> str:
    to_encode = {
        "sub": sub,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + expires_delta,
    }
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALG)

def decode_token(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])

def auth_user(authorization: str | None = Header(default=None)) -> UserOut:
    """Resolve the bearer token to the current user or fail with 401."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        data = decode_token(token)
    except jwt.PyJWTError as e:
        logger.warning(f"Token decode failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = data.get("sub")
    # separate from any Depends(get_session) session the route holds
    db: Session
    with get_db() as db:
        user = db.get(User, user_id) if user_id else None
        if not user:
            logger.warning(f"User not found for id: {user_id}")
            raise HTTPException(status_code=401, detail="User not found")
        return UserOut.model_validate(user)

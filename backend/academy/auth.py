# backend/academy/auth.py

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from academy import config
from academy.schemas import Role, User, UserCreate, UserOut
from academy.storage import Storage, get_storage

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# -----------------------------
# Password utilities
# -----------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

# -----------------------------
# JWT utilities
# -----------------------------
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    if not config.SECRET_KEY:
        raise RuntimeError("SECRET_KEY is not set in environment variables")
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=ALGORITHM)

def get_current_user(token: str = Depends(oauth2_scheme), storage: Storage = Depends(get_storage)) -> User:
    """Resolve the bearer token to the acting user; this is the principal passed into every route."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"}
    )
    if not config.SECRET_KEY:
        raise credentials_exception
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise credentials_exception

    user = storage.get_user(user_id)
    if user is None:
        raise credentials_exception
    return user

# -----------------------------
# Role-based access
# -----------------------------
def require_role(allowed_roles: List[str]):
    def wrapper(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: Insufficient role")
        return current_user
    return wrapper

# Roles allowed to change academy data
STAFF_ROLES = [Role.ADMIN.value, Role.COACH.value]

# -----------------------------
# FastAPI Router
# -----------------------------
router = APIRouter(prefix="/api/auth", tags=["Auth"])

class LoginRequest(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut

# -----------------------------
# Auth endpoints
# -----------------------------
@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, storage: Storage = Depends(get_storage)):
    user = storage.get_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password):
        logger.info("login_failed", username=payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token({"sub": str(user.id)})
    logger.info("login_succeeded", user_id=user.id)
    return {"access_token": token, "token_type": "bearer", "user": UserOut(**user.model_dump())}

@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    current_user: User = Depends(require_role([Role.ADMIN.value])),
    storage: Storage = Depends(get_storage)
):
    # ConflictError for a taken username is rendered as 400 by the app
    user = storage.create_user(payload.model_copy(update={"password": hash_password(payload.password)}))
    logger.info("user_registered", user_id=user.id, registered_by=current_user.id)
    return UserOut(**user.model_dump())

@router.post("/logout")
def logout():
    # Tokens are stateless; the client drops its token.
    return {"message": "Logged out successfully"}

@router.get("/user", response_model=UserOut)
def read_current_user(current_user: User = Depends(get_current_user)):
    return UserOut(**current_user.model_dump())

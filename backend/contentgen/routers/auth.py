from datetime import datetime, timedelta, timezone
from typing import Optional, Dict

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
import logging

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AdminUser

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class Admin(BaseModel):
	email: str
	role: str = "admin"


_seed_admins: Dict[str, str] = {}


def _bcrypt_safe(password: str) -> str:
	# Truncate password to 72 bytes for bcrypt compatibility
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
	return pwd_context.hash(_bcrypt_safe(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)


def _ensure_seed_admin() -> None:
	email = settings.seed_admin_email
	password = settings.seed_admin_password
	if email and password and email not in _seed_admins:
		_seed_admins[email] = hash_password(password)


def authenticate_admin(db: Session, email: str, password: str) -> Optional[Admin]:
	row = db.get(AdminUser, email)
	if row and row.is_active and verify_password(password, row.password_hash):
		return Admin(email=email, role=row.role)
	# Fallback to seed admin from env for first-run setup
	_ensure_seed_admin()
	hashed = _seed_admins.get(email)
	if hashed and verify_password(password, hashed):
		return Admin(email=email)
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=1)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	admin = authenticate_admin(db, form_data.username, form_data.password)
	if not admin:
		logger.info("Rejected admin login for %s", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect email or password")
	return Token(access_token=create_access_token({"sub": admin.email, "role": admin.role}))


def get_current_admin(token: str = Depends(oauth2_scheme)) -> Admin:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
		email: str | None = payload.get("sub")
		role: str | None = payload.get("role")
		if email is None:
			raise credentials_exception
	except JWTError:
		raise credentials_exception
	if role != "admin":
		raise HTTPException(status_code=403, detail="Not authorized as admin")
	return Admin(email=email, role=role)


@router.get("/me", response_model=Admin)
async def me(admin: Admin = Depends(get_current_admin)):
	return admin

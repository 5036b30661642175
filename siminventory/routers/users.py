import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from siminventory.database import get_db
from siminventory.models.user import User
from siminventory.schemas.user import (
    UserRegister, UserCreate, UserUpdate, UserResponse, LoginRequest, TokenResponse,
)
from siminventory.routers.auth import (
    require_user, require_admin, check_rate_limit, reset_rate_limit, client_ip,
)
import siminventory.services.user_service as svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=TokenResponse, status_code=201)
def register(data: UserRegister, db: Session = Depends(get_db)):
    user = svc.register_user(db, data)
    logger.info("AUDIT: self-registration of '%s' (role=%s)", user.email, user.role)
    return {"access_token": svc.create_access_token(user), "user": user}


@router.post("/login", response_model=TokenResponse)
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    ip = client_ip(request)
    if not check_rate_limit(ip):
        raise HTTPException(status_code=429, detail="Too many login attempts. Try again in a minute.")
    user = svc.authenticate(db, data.email, data.password)
    if not user:
        logger.warning("AUDIT: failed login for '%s' from IP %s", data.email, ip)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        logger.warning("AUDIT: login attempt on deactivated account '%s' from IP %s", data.email, ip)
        raise HTTPException(status_code=403, detail="Account is deactivated")
    reset_rate_limit(ip)
    logger.info("AUDIT: login '%s' (role=%s) from IP %s", user.email, user.role, ip)
    return {"access_token": svc.create_access_token(user), "user": user}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(require_user)):
    return user


@router.get("", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db), _=Depends(require_admin)):
    return svc.get_users(db)


@router.post("/admin", response_model=UserResponse, status_code=201)
def create_user(data: UserCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = svc.create_user(db, data)
    logger.info("AUDIT: '%s' created user '%s' (role=%s)", admin.email, user.email, user.role)
    return user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    return svc.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, data: UserUpdate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = svc.update_user(db, user_id, data)
    logger.info("AUDIT: '%s' updated user '%s' (role=%s)", admin.email, user.email, user.role)
    return user


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    svc.delete_user(db, user_id, acting_user_id=admin.id)
    logger.info("AUDIT: '%s' deleted user %s", admin.email, user_id)
    return {"message": "User removed"}

from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from fastapi import HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from siminventory.config import settings
from siminventory.models.user import User, Role
from siminventory.models.transaction import Transaction
from siminventory.schemas.user import UserRegister, UserCreate, UserUpdate

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_users(db: Session) -> list[User]:
    return db.scalars(select(User).order_by(User.name)).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(func.lower(User.email) == email.lower()))


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def register_user(db: Session, data: UserRegister) -> User:
    """Self-registration always yields a Staff account."""
    return create_user(db, UserCreate(**data.model_dump(), role=Role.staff))


def create_user(db: Session, data: UserCreate) -> User:
    if get_user_by_email(db, data.email):
        raise HTTPException(status_code=400, detail="User already exists")
    user = User(
        name=data.name,
        email=data.email,
        hashed_password=hash_password(data.password),
        role=data.role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in update_data:
        other = get_user_by_email(db, update_data["email"])
        if other and other.id != user.id:
            raise HTTPException(status_code=400, detail="User already exists")
    if "password" in update_data:
        update_data["hashed_password"] = hash_password(update_data.pop("password"))
    if "role" in update_data:
        update_data["role"] = update_data["role"].value
    for field, value in update_data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, acting_user_id: int | None = None) -> None:
    user = get_user(db, user_id)
    if acting_user_id is not None and user.id == acting_user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    has_history = db.scalar(
        select(func.count()).select_from(Transaction).where(Transaction.performed_by == user_id)
    )
    if has_history:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete a user with recorded transactions. Deactivate the account instead.",
        )
    db.delete(user)
    db.commit()

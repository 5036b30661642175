import logging
import time
from collections import defaultdict

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from siminventory.database import get_db
from siminventory.models.user import User, Role
from siminventory.services.user_service import decode_token

logger = logging.getLogger(__name__)

MANAGER_ROLES = {Role.admin.value, Role.inventory_manager.value}

bearer_scheme = HTTPBearer(auto_error=False)

# Rate limiting (in-memory, per IP)
_login_attempts: dict[str, list[float]] = defaultdict(list)
_RATE_LIMIT_WINDOW = 60   # seconds
_RATE_LIMIT_MAX = 10      # max attempts per window


def check_rate_limit(ip: str) -> bool:
    now = time.time()
    _login_attempts[ip] = [t for t in _login_attempts[ip] if now - t < _RATE_LIMIT_WINDOW]
    if len(_login_attempts[ip]) >= _RATE_LIMIT_MAX:
        return False
    _login_attempts[ip].append(now)
    return True


def reset_rate_limit(ip: str) -> None:
    """Clear failed attempts after successful login."""
    _login_attempts.pop(ip, None)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# Bearer-token dependencies
def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def require_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Dependency: any authenticated, active user."""
    if credentials is None:
        raise _unauthorized("Not authorized, no token")
    payload = decode_token(credentials.credentials)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise _unauthorized("Not authorized, token failed")
    user = db.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        raise _unauthorized("Not authorized, user not found")
    return user


def require_manager(user: User = Depends(require_user)) -> User:
    """Dependency: requires role Admin or Inventory Manager."""
    if user.role not in MANAGER_ROLES:
        raise HTTPException(status_code=403, detail=f"User role {user.role} is not authorized to access this route")
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    """Dependency: requires role Admin."""
    if user.role != Role.admin.value:
        raise HTTPException(status_code=403, detail=f"User role {user.role} is not authorized to access this route")
    return user

"""Organizer identity from the externally issued JWT.

Token issuance (register/login) lives in the auth service; this module only
verifies the token and hands an explicit `OrganizerIdentity` to the routes,
which pass it on to every service call.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from guestlist.config import settings

logger = logging.getLogger(__name__)

ORGANIZER_ROLE = "organizer"

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class OrganizerIdentity:
    id: str
    role: str

    @property
    def is_organizer(self) -> bool:
        return self.role == ORGANIZER_ROLE


def create_access_token(organizer_id: str, role: str = ORGANIZER_ROLE, expires_delta: Optional[timedelta] = None) -> str:
    """Create an HS256 token in the shape the auth service issues."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": organizer_id,
        "role": role,
        "iat": now,
        "exp": now + (expires_delta or timedelta(days=7)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def get_current_organizer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> OrganizerIdentity:
    """Dependency: httpOnly `token` cookie first, then the Bearer header."""
    token = request.cookies.get("token") or (credentials.credentials if credentials else None)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    payload = verify_token(token)
    if payload is None or not payload.get("id"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")

    return OrganizerIdentity(id=str(payload["id"]), role=str(payload.get("role", "")))


def require_organizer_role(organizer: OrganizerIdentity) -> None:
    if not organizer.is_organizer:
        logger.warning("User %s with role %r attempted an organizer-only action", organizer.id, organizer.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only organizers can perform this action")

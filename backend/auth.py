# auth.py - caller identity and route-level role gate
#
# Authentication happens upstream; by the time a request reaches this
# service the caller's id travels in a header and is resolved against
# the staff directory.
from typing import Optional
from fastapi import Depends, Header
from pydantic import BaseModel
from sqlalchemy.orm import Session

import config
from database import get_db
from errors import AuthenticationError, AuthorizationError
from models import MAX_ID, RoleEnum, Staff


class Requester(BaseModel):
    id: int
    role: RoleEnum
    hotel_id: Optional[int] = None

    @classmethod
    def from_staff(cls, s: Staff) -> "Requester":
        return cls(id=s.id, role=s.role, hotel_id=s.hotel_id)


def get_requester(
    user_id: Optional[str] = Header(None, alias=config.USER_HEADER),
    db: Session = Depends(get_db),
) -> Requester:
    if not user_id:
        raise AuthenticationError("Authentication required. Please login.")
    if not user_id.strip().isdecimal() or not 0 < int(user_id) <= MAX_ID:
        raise AuthenticationError("Authentication failed.")
    s = db.get(Staff, int(user_id))
    if s is None or not s.is_active:
        raise AuthenticationError("Authentication failed.")
    return Requester.from_staff(s)


def require_roles(*roles: RoleEnum):
    """Dependency factory rejecting callers whose role is not listed."""
    allowed = ", ".join(r.value for r in roles)

    def _check(requester: Requester = Depends(get_requester)) -> Requester:
        if requester.role not in roles:
            raise AuthorizationError(f"Access denied. Required role(s): {allowed}")
        return requester

    return _check

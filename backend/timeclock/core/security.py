"""PIN sessions for the kiosk.

Login issues an opaque bearer token kept in a SessionStore. The store is a
FastAPI dependency so it can be swapped (tests, or a shared store when the
API runs with several workers).
"""
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session as DBSession

from timeclock.core.config import settings
from timeclock.core.database import get_db
from timeclock.models.employee import Employee


@dataclass
class SessionData:
    employee_id: int
    is_admin: bool
    expires_at: datetime


class SessionStore:
    """In-memory token -> session map."""

    def __init__(self, max_age: Optional[timedelta] = None):
        self.max_age = max_age or timedelta(hours=settings.SESSION_MAX_AGE_HOURS)
        self._sessions: Dict[str, SessionData] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> Optional[SessionData]:
        with self._lock:
            data = self._sessions.get(token)
            if data and data.expires_at <= datetime.now(timezone.utc):
                del self._sessions[token]
                return None
            return data

    def set(self, token: str, data: SessionData) -> None:
        with self._lock:
            self._sessions[token] = data

    def destroy(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def create(self, employee: Employee) -> str:
        token = secrets.token_urlsafe(32)
        self.set(token, SessionData(
            employee_id=employee.id,
            is_admin=bool(employee.is_admin),
            expires_at=datetime.now(timezone.utc) + self.max_age,
        ))
        return token


_session_store = SessionStore()
bearer_scheme = HTTPBearer(auto_error=False)


# Dependency for FastAPI routes
def get_session_store() -> SessionStore:
    return _session_store


def get_session_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return credentials.credentials


def get_current_employee(
    token: str = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
    db: DBSession = Depends(get_db),
) -> Employee:
    data = store.get(token)
    if data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired or invalid")

    employee = db.query(Employee).filter(Employee.id == data.employee_id).first()
    if not employee or not employee.is_active:
        store.destroy(token)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return employee


def require_admin(employee: Employee):
    if not employee.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")

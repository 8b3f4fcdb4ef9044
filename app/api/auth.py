# app/api/auth.py
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_auth_context(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> AuthContext:
    """Naglowki ustawia zewnetrzna warstwa auth (gateway), tu tylko je czytamy."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "User not authenticated"})
    return AuthContext(user_id=x_user_id, role=x_user_role or "customer")


def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=403, detail={"code": "FORBIDDEN", "message": "Admin access required"})
    return auth

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from leapboard.core.config import settings


# Tokens are minted by the hosted identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


@dataclass(frozen=True)
class Principal:
    subject: str
    email: str | None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def decode_token(token: str) -> Principal:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=str(getattr(settings, "jwt_issuer", "leapboard")),
        )
    except JWTError as e:
        raise HTTPException(status_code=401, detail="invalid token") from e

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise HTTPException(status_code=401, detail="invalid token")

    email = str(payload.get("email") or "").strip() or None
    role = str(payload.get("role") or "student").strip().lower()
    return Principal(subject=subject, email=email, role=role)


def get_current_principal(
    request: Request,
    token: str = Depends(oauth2_scheme),
) -> Principal:
    if not token:
        token = request.cookies.get("leap_token")
    if not token:
        raise HTTPException(status_code=401, detail="not authenticated")

    principal = decode_token(token)
    request.state.user_id = principal.subject
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="forbidden")
    return principal

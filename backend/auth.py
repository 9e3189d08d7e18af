from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
import httpx

from config import settings


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None
    is_anonymous: bool = False


def is_admin_email(email: Optional[str]) -> bool:
    return bool(email) and email.lower() in settings.admin_emails


async def _fetch_user(access_token: str) -> dict:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_service_role_key,
    }
    url = f"{settings.supabase_url}/auth/v1/user"
    async with httpx.AsyncClient(timeout=10) as client:
        response = await client.get(url, headers=headers)
    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
    return response.json()


def _to_auth_user(profile: dict) -> AuthUser:
    user_id = profile.get("id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user profile"
        )
    email = profile.get("email")
    return AuthUser(
        id=str(user_id),
        email=email.lower() if isinstance(email, str) and email else None,
        is_anonymous=bool(profile.get("is_anonymous", False)),
    )


async def get_current_user(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> AuthUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Você precisa estar autenticado.",
        )
    token = authorization.split(" ", 1)[1]
    profile = await _fetch_user(token)
    return _to_auth_user(profile)


async def get_optional_user(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> AuthUser | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    try:
        return await get_current_user(authorization)
    except HTTPException:
        return None


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not is_admin_email(user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito ao administrador.",
        )
    return user

from fastapi import APIRouter, Depends

from auth import AuthUser, get_optional_user
from schemas import AuthInfoResponse
from services.info_service import get_auth_info

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/info", response_model=AuthInfoResponse)
async def read_auth_info(
    user: AuthUser | None = Depends(get_optional_user),
) -> AuthInfoResponse:
    return get_auth_info(user)

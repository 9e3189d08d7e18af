from auth import AuthUser, is_admin_email
from schemas import AuthInfoResponse


def get_auth_info(user: AuthUser | None) -> AuthInfoResponse:
    if user is None:
        return AuthInfoResponse(
            is_authenticated=False,
            is_anonymous=False,
            is_admin=False,
            email=None,
            user_id=None,
        )
    return AuthInfoResponse(
        is_authenticated=True,
        is_anonymous=user.is_anonymous,
        is_admin=is_admin_email(user.email),
        email=user.email,
        user_id=user.id,
    )

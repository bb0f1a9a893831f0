from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from chillpoints.services.api_client import UserSession
from chillpoints.services.chill_points_service import ChillPointsStore
from chillpoints.services.i18n import Translator, negotiate_locale


def get_user_session(
    authorization: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
) -> Optional[UserSession]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authorization must be a Bearer token")
    return UserSession(token=token.strip(), email=x_user_email)


def require_user_session(session: Optional[UserSession] = Depends(get_user_session)) -> UserSession:
    if session is None:
        raise HTTPException(status_code=401, detail="Sign in to use Chill Points")
    return session


def get_store(
    request: Request,
    session: Optional[UserSession] = Depends(get_user_session),
) -> ChillPointsStore:
    return request.app.state.stores.get(session)


def get_translator(
    request: Request,
    accept_language: str | None = Header(default=None, alias="Accept-Language"),
) -> Translator:
    default = request.app.state.settings.ui.default_locale
    return Translator(negotiate_locale(accept_language, default=default))

from typing import Optional

from fastapi import Depends, Request, WebSocket
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette import status

from sortie.core.constants import ROLE_ADMIN
from sortie.core.security import decode_access_token
from sortie.database.session import get_db
from sortie.models.user import User

TOKEN_COOKIE = "access_token"


def redirect_to_login(request: Request, message: str):
    response = RedirectResponse(
        url=request.url_for("login_page"),
        status_code=status.HTTP_302_FOUND
    )
    response.set_cookie("flash_error", message, max_age=5, path="/")
    return response


def user_from_token(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
):
    token = request.cookies.get(TOKEN_COOKIE)

    if not token:
        return redirect_to_login(request, "Please login to continue")

    user = user_from_token(db, token)

    if not user:
        return redirect_to_login(request, "Session expired. Please login again")

    return user


def admin_only(
    request: Request,
    current_user: User = Depends(get_current_user)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    if current_user.role != ROLE_ADMIN:
        return redirect_to_login(request, "Admin access only")

    return current_user


def websocket_admin(websocket: WebSocket, sessions: sessionmaker) -> Optional[str]:
    """Email of the admin behind the websocket's cookie, or None.

    Blocking; uses its own session and closes it before returning.
    """
    db = sessions()
    try:
        user = user_from_token(db, websocket.cookies.get(TOKEN_COOKIE))
        if user is None or user.role != ROLE_ADMIN:
            return None
        return user.email
    finally:
        db.close()

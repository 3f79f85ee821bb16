import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sortie.auth.dependencies import TOKEN_COOKIE, user_from_token
from sortie.core.config import settings
from sortie.core.security import create_access_token, verify_password
from sortie.core.templates import templates
from sortie.database.session import get_db
from sortie.models.user import User
from sortie.schemas.user import LoginForm
from sortie.utils.flash import flash_redirect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def render_login(request: Request, *, form=None, errors=None, status_code=200):
    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"form": form or {"email": ""}, "errors": errors or {}},
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse, name="login_page")
def login_page(request: Request, db: Session = Depends(get_db)):
    if user_from_token(db, request.cookies.get(TOKEN_COOKIE)):
        return flash_redirect(request.url_for("admin_dashboard"), "You are already logged in")
    return render_login(request)


@router.post("/login", name="login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        credentials = LoginForm(email=email, password=password)
    except ValidationError as e:
        return render_login(
            request,
            form={"email": email},
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400,
        )

    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for %s", credentials.email)
        return render_login(
            request,
            form={"email": email},
            errors={"__all__": "Invalid email or password"},
            status_code=401,
        )

    response = flash_redirect(request.url_for("admin_dashboard"), "Welcome back")
    response.set_cookie(
        TOKEN_COOKIE,
        create_access_token(user.id),
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    logger.info("User %s logged in", user.email)
    return response


@router.post("/logout", name="logout")
def logout(request: Request):
    response = flash_redirect(request.url_for("home"), "You have been successfully logged out.")
    response.delete_cookie(TOKEN_COOKIE, path="/")
    return response

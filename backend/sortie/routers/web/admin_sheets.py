from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from sortie.auth.dependencies import admin_only
from sortie.core.config import Settings, get_settings
from sortie.core.templates import templates
from sortie.models.user import User
from sortie.schemas.sheets import SheetsEntry
from sortie.services.sheets_service import SheetsError, send_to_sheets
from sortie.utils.flash import flash_redirect

router = APIRouter(prefix="/admin/sheets", tags=["Google Sheets"])


def render_form(request: Request, *, form, errors=None, status_code=200):
    return templates.TemplateResponse(
        request,
        "admin/sheets.html",
        {"form": form, "errors": errors or {}},
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse, name="admin_sheets")
def sheets_page(
    request: Request,
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    return render_form(
        request,
        form={"webhook_url": settings.SHEETS_WEBHOOK_URL or "", "name": "", "email": "", "message": ""},
    )


@router.post("", name="admin_sheets_send")
def sheets_send(
    request: Request,
    webhook_url: str = Form(""),
    name: str = Form(""),
    email: str = Form(""),
    message: str = Form(""),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    form = {"webhook_url": webhook_url, "name": name, "email": email, "message": message}

    if not webhook_url.strip():
        return render_form(
            request,
            form=form,
            errors={"webhook_url": "Please enter your Google Sheets webhook URL"},
            status_code=400,
        )

    try:
        entry = SheetsEntry(**form)
    except ValidationError as e:
        return render_form(
            request,
            form=form,
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400,
        )

    try:
        send_to_sheets(entry)
    except SheetsError:
        return render_form(
            request,
            form=form,
            errors={"__all__": "Failed to send data to Google Sheets. Please check the webhook URL and try again."},
            status_code=502,
        )

    return flash_redirect(
        request.url_for("admin_sheets"),
        "Data sent to Google Sheets successfully! Check your spreadsheet to confirm.",
    )

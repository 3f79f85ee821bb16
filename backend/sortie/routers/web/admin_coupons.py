from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sortie.auth.dependencies import admin_only
from sortie.core.templates import templates
from sortie.database.session import get_db
from sortie.models.user import User
from sortie.schemas.coupon import CouponCreate, CouponUpdate
from sortie.services import coupon_service
from sortie.services.errors import NotFound, PersistenceError
from sortie.utils.dates import as_utc, utcnow
from sortie.utils.flash import flash_error, flash_redirect

router = APIRouter(prefix="/admin/coupons", tags=["Coupons"])

DATETIME_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


# -------------------------------------------------
# Helper: render form
# -------------------------------------------------
def render_form(
    request: Request,
    *,
    coupon=None,
    form=None,
    errors=None,
    status_code=200
):
    return templates.TemplateResponse(
        request,
        "admin/coupons/form.html",
        {
            "coupon": coupon,
            "form": form or {"code": "", "discount": "", "is_active": True, "expires_at": ""},
            "errors": errors or {},
        },
        status_code=status_code
    )


@router.get("", response_class=HTMLResponse, name="admin_coupons")
def coupon_list(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    now = utcnow()
    coupons = [
        {
            "coupon": c,
            "expired": c.expires_at is not None and as_utc(c.expires_at) < now,
        }
        for c in coupon_service.list_coupons(db)
    ]

    return templates.TemplateResponse(
        request,
        "admin/coupons/list.html",
        {"coupons": coupons}
    )


@router.get("/create", response_class=HTMLResponse, name="admin_coupon_create_page")
def coupon_create_page(
    request: Request,
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    return render_form(request)


@router.post("/create", name="admin_coupon_create")
def coupon_create(
    request: Request,
    code: str = Form(""),
    discount: str = Form(""),
    is_active: bool = Form(False),
    expires_at: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    form = {"code": code, "discount": discount, "is_active": is_active, "expires_at": expires_at}

    try:
        data = CouponCreate(**form)
    except ValidationError as e:
        return render_form(
            request,
            form=form,
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400
        )

    try:
        coupon_service.create_coupon(db, data)
    except PersistenceError as e:
        return render_form(request, form=form, errors={"code": e.message}, status_code=400)

    return flash_redirect(request.url_for("admin_coupons"), "Coupon created successfully")


@router.get("/{coupon_id}/edit", response_class=HTMLResponse, name="admin_coupon_edit_page")
def coupon_edit_page(
    coupon_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        coupon = coupon_service.get_coupon(db, coupon_id)
    except NotFound as e:
        return flash_error(request.url_for("admin_coupons"), e.message)

    return render_form(
        request,
        coupon=coupon,
        form={
            "code": coupon.code,
            "discount": coupon.discount,
            "is_active": coupon.is_active,
            "expires_at": coupon.expires_at.strftime(DATETIME_INPUT_FORMAT) if coupon.expires_at else "",
        }
    )


@router.post("/{coupon_id}/edit", name="admin_coupon_update")
def coupon_update(
    coupon_id: int,
    request: Request,
    code: str = Form(""),
    discount: str = Form(""),
    is_active: bool = Form(False),
    expires_at: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        coupon = coupon_service.get_coupon(db, coupon_id)
    except NotFound as e:
        return flash_error(request.url_for("admin_coupons"), e.message)

    form = {"code": code, "discount": discount, "is_active": is_active, "expires_at": expires_at}

    try:
        data = CouponUpdate(**form)
    except ValidationError as e:
        return render_form(
            request,
            coupon=coupon,
            form=form,
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400
        )

    try:
        coupon_service.update_coupon(db, coupon_id, data)
    except PersistenceError as e:
        return render_form(request, coupon=coupon, form=form, errors={"code": e.message}, status_code=400)

    return flash_redirect(request.url_for("admin_coupons"), "Coupon updated successfully")


@router.post("/{coupon_id}/delete", name="admin_coupon_delete")
def coupon_delete(
    coupon_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        coupon_service.delete_coupon(db, coupon_id)
    except (NotFound, PersistenceError) as e:
        return flash_error(request.url_for("admin_coupons"), e.message)

    return flash_redirect(request.url_for("admin_coupons"), "Coupon deleted", category="warning")

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sortie.core.config import Settings, get_settings
from sortie.core.constants import PARTY_SIZES, REGIONS
from sortie.core.i18n import LANGUAGE_COOKIE, LANGUAGES
from sortie.core.templates import templates
from sortie.database.session import get_db
from sortie.schemas.booking import BookingCreate
from sortie.services import gallery_service, trip_service
from sortie.services.booking_service import submit_booking
from sortie.services.change_feed import ChangeFeed, get_change_feed
from sortie.services.coupon_service import validate_coupon
from sortie.services.errors import NotFound, PersistenceError, ValidationFailed
from sortie.services.pricing import quote
from sortie.utils.flash import flash_error, flash_redirect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Public"])

HOME_GALLERY_LIMIT = 4

BOOKING_SUCCESS = "Booking Submitted! We'll contact you within 24 hours to confirm your reservation."

EMPTY_BOOKING_FORM = {
    "name": "",
    "phone": "",
    "email": "",
    "trip_id": "",
    "people": "1",
    "pickup": "",
    "notes": "",
    "coupon_code": "",
}


# =================================================
# HOME
# =================================================
@router.get("/", response_class=HTMLResponse, name="home")
def home(request: Request, db: Session = Depends(get_db)):
    try:
        featured = gallery_service.get_featured(db)
        latest = gallery_service.list_images(db, limit=HOME_GALLERY_LIMIT)
    except PersistenceError as e:
        logger.error("Home gallery failed to load: %s", e)
        featured, latest = None, []

    return templates.TemplateResponse(
        request,
        "public/home.html",
        {"featured": featured, "gallery": latest},
    )


# =================================================
# VOYAGES CATALOG
# =================================================
@router.get("/voyages", response_class=HTMLResponse, name="voyages_page")
def voyages_page(
    request: Request,
    q: str = Query(""),
    region: str = Query("all"),
    db: Session = Depends(get_db),
):
    error = None
    try:
        trips = trip_service.load_catalog(db)
    except PersistenceError as e:
        logger.error("Trips failed to load: %s", e)
        trips, error = [], "Failed to load trips."

    return templates.TemplateResponse(
        request,
        "public/voyages.html",
        {
            "trips": trip_service.search_trips(trips, q, region),
            "q": q,
            "region": region,
            "regions": REGIONS,
            "trips_error": error,
        },
    )


# =================================================
# BOOKING
# =================================================
def render_booking_form(
    request: Request,
    db: Session,
    *,
    form=None,
    errors=None,
    status_code=200,
):
    trips_error = None
    try:
        trips = trip_service.load_catalog(db)
    except PersistenceError as e:
        logger.error("Trips failed to load: %s", e)
        trips, trips_error = [], "Failed to load trips."

    return templates.TemplateResponse(
        request,
        "public/booking.html",
        {
            "trips": trips,
            "trips_error": trips_error,
            "party_sizes": PARTY_SIZES,
            "form": form or dict(EMPTY_BOOKING_FORM),
            "errors": errors or {},
        },
        status_code=status_code,
    )


@router.get("/booking", response_class=HTMLResponse, name="booking_page")
def booking_page(
    request: Request,
    trip: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    form = dict(EMPTY_BOOKING_FORM)
    if trip:
        form["trip_id"] = trip
    return render_booking_form(request, db, form=form)


@router.post("/booking", name="booking_submit")
def booking_submit(
    request: Request,
    name: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    trip_id: str = Form(""),
    people: str = Form("1"),
    pickup: str = Form(""),
    notes: str = Form(""),
    coupon_code: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    feed: ChangeFeed = Depends(get_change_feed),
):
    form = {
        "name": name,
        "phone": phone,
        "email": email,
        "trip_id": trip_id,
        "people": people,
        "pickup": pickup,
        "notes": notes,
        "coupon_code": coupon_code,
    }

    try:
        payload = BookingCreate(**form)
        submit_booking(
            db,
            payload,
            reveal_inactive=settings.COUPON_REVEAL_INACTIVE,
            feed=feed,
        )
    except ValidationError as e:
        failure = ValidationFailed.from_pydantic(e)
        return render_booking_form(request, db, form=form, errors=failure.errors, status_code=400)
    except ValidationFailed as e:
        errors = {field: e.message for field in e.errors} or {"__all__": e.message}
        return render_booking_form(request, db, form=form, errors=errors, status_code=400)
    except PersistenceError as e:
        return flash_error(request.url_for("booking_page"), e.message)

    return flash_redirect(request.url_for("booking_page"), BOOKING_SUCCESS)


@router.post("/booking/coupon", name="booking_coupon")
def booking_coupon(
    code: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        check = validate_coupon(db, code, reveal_inactive=settings.COUPON_REVEAL_INACTIVE)
    except PersistenceError as e:
        logger.error("Coupon lookup failed: %s", e)
        return JSONResponse({"valid": False, "reason": e.code, "message": e.message}, status_code=502)

    if not check.valid:
        return JSONResponse({"valid": False, "reason": check.reason.value, "message": check.message})

    return JSONResponse(
        {"valid": True, "code": check.code, "discount": check.discount, "message": check.message}
    )


@router.get("/booking/quote", name="booking_quote")
def booking_quote(
    trip_id: int = Query(...),
    people: int = Query(1, ge=1),
    coupon_code: str = Query(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        trip = trip_service.get_trip(db, trip_id)
    except NotFound as e:
        return JSONResponse({"error": e.message}, status_code=404)

    discount = 0
    coupon_message = None
    if coupon_code.strip():
        try:
            check = validate_coupon(db, coupon_code, reveal_inactive=settings.COUPON_REVEAL_INACTIVE)
        except PersistenceError as e:
            logger.error("Coupon lookup failed during quote: %s", e)
            return JSONResponse({"error": e.message}, status_code=502)
        discount = check.discount if check.valid else 0
        coupon_message = check.message

    price = quote(trip.price, people, discount)
    return JSONResponse(
        {
            "trip_id": trip.id,
            "people": people,
            "discount": price.discount,
            "total": str(price.total),
            "discounted_total": str(price.discounted_total),
            "coupon_message": coupon_message,
        }
    )


# =================================================
# GALLERY / PORTFOLIO
# =================================================
@router.get("/gallery", response_class=HTMLResponse, name="gallery_page")
def gallery_page(request: Request, db: Session = Depends(get_db)):
    try:
        images = gallery_service.list_images(db)
    except PersistenceError as e:
        logger.error("Gallery failed to load: %s", e)
        images = []

    return templates.TemplateResponse(request, "public/gallery.html", {"images": images})


@router.get("/portfolio", response_class=HTMLResponse, name="portfolio_page")
def portfolio_page(request: Request, db: Session = Depends(get_db)):
    try:
        images = gallery_service.list_images(db)
        trips = trip_service.load_catalog(db)
    except PersistenceError as e:
        logger.error("Portfolio failed to load: %s", e)
        images, trips = [], []

    return templates.TemplateResponse(
        request,
        "public/portfolio.html",
        {"images": images, "trips": trips},
    )


# =================================================
# LANGUAGE
# =================================================
@router.get("/language/{code}", name="set_language")
def set_language(code: str, request: Request):
    target = request.headers.get("referer") or str(request.url_for("home"))
    response = RedirectResponse(url=target, status_code=303)
    if code in LANGUAGES:
        response.set_cookie(LANGUAGE_COOKIE, code, max_age=60 * 60 * 24 * 365, path="/")
    return response

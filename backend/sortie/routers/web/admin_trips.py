import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sortie.auth.dependencies import admin_only
from sortie.core.constants import REGIONS
from sortie.core.templates import templates
from sortie.database.session import get_db
from sortie.models.user import User
from sortie.schemas.trip import TripCreate, TripUpdate, parse_int, parse_price, split_features
from sortie.services import trip_service
from sortie.services.errors import NotFound, PersistenceError
from sortie.services.storage_service import FileStorage, StorageError, get_storage
from sortie.utils.file_upload import is_image, save_file
from sortie.utils.flash import flash_error, flash_redirect

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/trips", tags=["Trips"])

TRIP_IMAGE_PREFIX = "trips"

EMPTY_FORM = {
    "title": "",
    "description": "",
    "destination": "",
    "region": "",
    "duration": "",
    "max_people": "",
    "price": "",
    "features": "",
    "is_available": True,
}


# -------------------------------------------------
# Helper: render form
# -------------------------------------------------
def render_form(
    request: Request,
    *,
    trip=None,
    form=None,
    errors=None,
    status_code=200
):
    return templates.TemplateResponse(
        request,
        "admin/trips/form.html",
        {
            "trip": trip,
            "form": form or dict(EMPTY_FORM),
            "errors": errors or {},
            "regions": REGIONS,
        },
        status_code=status_code
    )


def build_trip_data(schema, form: dict):
    # blank or malformed numbers become 0
    return schema(
        title=form["title"],
        description=form["description"],
        destination=form["destination"],
        region=form["region"] or None,
        duration=form["duration"] or None,
        max_people=parse_int(form["max_people"]),
        price=parse_price(form["price"]),
        features=split_features(form["features"]),
        is_available=bool(form["is_available"]),
    )


def store_image(storage: FileStorage, image: UploadFile, user: User):
    if not image or not image.filename:
        return None
    if not is_image(image.filename):
        raise StorageError(f"{image.filename} is not an image")
    return save_file(storage, image, user.id, prefix=TRIP_IMAGE_PREFIX)


# =================================================
# LIST PAGE
# =================================================
@router.get("", response_class=HTMLResponse, name="admin_trips")
def trip_list(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    return templates.TemplateResponse(
        request,
        "admin/trips/list.html",
        {"trips": trip_service.list_trips(db), "regions": REGIONS}
    )


# =================================================
# CREATE
# =================================================
@router.get("/create", response_class=HTMLResponse, name="admin_trip_create_page")
def trip_create_page(
    request: Request,
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    return render_form(request)


@router.post("/create", name="admin_trip_create")
def trip_create(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    destination: str = Form(""),
    region: str = Form(""),
    duration: str = Form(""),
    max_people: str = Form(""),
    price: str = Form(""),
    features: str = Form(""),
    is_available: bool = Form(False),
    image: UploadFile = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    form = {
        "title": title,
        "description": description,
        "destination": destination,
        "region": region,
        "duration": duration,
        "max_people": max_people,
        "price": price,
        "features": features,
        "is_available": is_available,
    }

    try:
        data = build_trip_data(TripCreate, form)
    except ValidationError as e:
        return render_form(
            request,
            form=form,
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400
        )

    try:
        image_url = store_image(storage, image, current_user)
        trip_service.create_trip(db, data, image=image_url)
    except StorageError as e:
        logger.error("Trip image upload failed: %s", e)
        return render_form(request, form=form, errors={"image": str(e)}, status_code=400)
    except PersistenceError as e:
        return flash_error(request.url_for("admin_trips"), e.message)

    return flash_redirect(request.url_for("admin_trips"), "Trip added successfully!")


# =================================================
# EDIT
# =================================================
@router.get("/{trip_id}/edit", response_class=HTMLResponse, name="admin_trip_edit_page")
def trip_edit_page(
    trip_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        trip = trip_service.get_trip(db, trip_id)
    except NotFound as e:
        return flash_error(request.url_for("admin_trips"), e.message)

    return render_form(
        request,
        trip=trip,
        form={
            "title": trip.title,
            "description": trip.description,
            "destination": trip.destination,
            "region": trip.region or "",
            "duration": trip.duration or "",
            "max_people": trip.max_people,
            "price": trip.price,
            "features": ", ".join(trip.features or []),
            "is_available": trip.is_available,
        }
    )


@router.post("/{trip_id}/edit", name="admin_trip_update")
def trip_update(
    trip_id: int,
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    destination: str = Form(""),
    region: str = Form(""),
    duration: str = Form(""),
    max_people: str = Form(""),
    price: str = Form(""),
    features: str = Form(""),
    is_available: bool = Form(False),
    image: UploadFile = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        trip = trip_service.get_trip(db, trip_id)
    except NotFound as e:
        return flash_error(request.url_for("admin_trips"), e.message)

    form = {
        "title": title,
        "description": description,
        "destination": destination,
        "region": region,
        "duration": duration,
        "max_people": max_people,
        "price": price,
        "features": features,
        "is_available": is_available,
    }

    try:
        data = build_trip_data(TripUpdate, form)
    except ValidationError as e:
        return render_form(
            request,
            trip=trip,
            form=form,
            errors={err["loc"][0]: err["msg"] for err in e.errors()},
            status_code=400
        )

    try:
        image_url = store_image(storage, image, current_user)
        trip_service.update_trip(db, trip_id, data, image=image_url)
    except StorageError as e:
        logger.error("Trip image upload failed: %s", e)
        return render_form(request, trip=trip, form=form, errors={"image": str(e)}, status_code=400)
    except PersistenceError as e:
        return flash_error(request.url_for("admin_trip_edit_page", trip_id=trip_id), e.message)

    return flash_redirect(request.url_for("admin_trips"), "Trip updated successfully!")


# =================================================
# DELETE
# =================================================
@router.post("/{trip_id}/delete", name="admin_trip_delete")
def trip_delete(
    trip_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        trip_service.delete_trip(db, trip_id)
    except (NotFound, PersistenceError) as e:
        return flash_error(request.url_for("admin_trips"), e.message)

    return flash_redirect(request.url_for("admin_trips"), "Trip has been deleted.", category="warning")

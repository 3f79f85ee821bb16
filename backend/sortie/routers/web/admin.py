import asyncio
import logging

from fastapi import APIRouter, Depends, Form, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from sortie.auth.dependencies import admin_only, websocket_admin
from sortie.core.constants import BOOKING_PENDING, BOOKING_STATUSES, PARTY_SIZES
from sortie.core.templates import templates
from sortie.database.session import get_db, get_session_factory
from sortie.models.booking import Booking
from sortie.models.coupon import Coupon
from sortie.models.gallery_image import GalleryImage
from sortie.models.trip import Trip
from sortie.models.user import User
from sortie.schemas.booking import BookingUpdate
from sortie.services import booking_service
from sortie.services.change_feed import ChangeFeed, get_change_feed
from sortie.services.errors import NotFound, PersistenceError, ValidationFailed
from sortie.services.export_service import bookings_to_csv
from sortie.utils.flash import flash_error, flash_redirect
from sortie.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def trip_titles(db: Session) -> dict:
    return {trip_id: title for trip_id, title in db.query(Trip.id, Trip.title).all()}


# =================================================
# DASHBOARD
# =================================================
@router.get("", response_class=HTMLResponse, name="admin_dashboard")
def admin_dashboard(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    counts = {
        "bookings": db.query(Booking).count(),
        "pending": db.query(Booking).filter(Booking.status == BOOKING_PENDING).count(),
        "trips": db.query(Trip).count(),
        "images": db.query(GalleryImage).count(),
        "coupons": db.query(Coupon).count(),
    }
    recent = booking_service.bookings_query(db).limit(5).all()

    return templates.TemplateResponse(
        request,
        "admin/dashboard.html",
        {
            "user": current_user,
            "counts": counts,
            "recent": recent,
            "trip_titles": trip_titles(db),
        },
    )


# =================================================
# BOOKINGS LIST
# =================================================
@router.get("/bookings", response_class=HTMLResponse, name="admin_bookings")
def admin_bookings(
    request: Request,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    return templates.TemplateResponse(
        request,
        "admin/bookings/list.html",
        {
            "pagination": paginate(booking_service.bookings_query(db), page),
            "trip_titles": trip_titles(db),
        },
    )


@router.get("/bookings/datatable", name="admin_bookings_datatable")
def admin_bookings_datatable(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return JSONResponse({"error": "Admin access only"}, status_code=401)

    titles = trip_titles(db)
    data = []
    for booking in booking_service.list_bookings(db):
        price = booking_service.price_for(db, booking)
        data.append({
            "id": booking.id,
            "name": booking.name,
            "email": booking.email,
            "phone": booking.phone,
            "trip": titles.get(booking.trip_id, booking.trip_id),
            "people": booking.people,
            "pickup": booking.pickup,
            "notes": booking.notes,
            "status": booking.status,
            "coupon_code": booking.coupon_code,
            "discount_percent": booking.discount_percent,
            "total": str(price.discounted_total) if price else None,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
            "edit_url": str(request.url_for("admin_booking_edit_page", booking_id=booking.id)),
            "delete_url": str(request.url_for("admin_booking_delete", booking_id=booking.id)),
        })

    return JSONResponse({"data": data})


@router.get("/bookings/export.csv", name="admin_bookings_export")
def admin_bookings_export(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        bookings = booking_service.list_bookings(db)
    except PersistenceError as e:
        return flash_error(request.url_for("admin_bookings"), e.message)

    logger.info("Exporting %d bookings to CSV", len(bookings))
    return Response(
        content=bookings_to_csv(bookings, trip_titles(db)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="bookings.csv"'},
    )


# =================================================
# EDIT / STATUS / DELETE
# =================================================
def render_booking_form(request: Request, db: Session, *, booking, form, errors=None, status_code=200):
    return templates.TemplateResponse(
        request,
        "admin/bookings/form.html",
        {
            "booking": booking,
            "form": form,
            "errors": errors or {},
            "statuses": BOOKING_STATUSES,
            "party_sizes": PARTY_SIZES,
            "trips": db.query(Trip).order_by(Trip.title).all(),
        },
        status_code=status_code,
    )


@router.get("/bookings/{booking_id}/edit", response_class=HTMLResponse, name="admin_booking_edit_page")
def admin_booking_edit_page(
    booking_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        booking = booking_service.get_booking(db, booking_id)
    except NotFound as e:
        return flash_error(request.url_for("admin_bookings"), e.message)

    form = {
        "name": booking.name,
        "email": booking.email or "",
        "phone": booking.phone,
        "trip_id": booking.trip_id,
        "people": booking.people,
        "pickup": booking.pickup or "",
        "notes": booking.notes or "",
        "status": booking.status,
    }
    return render_booking_form(request, db, booking=booking, form=form)


@router.post("/bookings/{booking_id}/edit", name="admin_booking_update")
def admin_booking_update(
    booking_id: int,
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    trip_id: str = Form(""),
    people: str = Form(""),
    pickup: str = Form(""),
    notes: str = Form(""),
    status: str = Form(""),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    form = {
        "name": name,
        "email": email,
        "phone": phone,
        "trip_id": trip_id,
        "people": people,
        "pickup": pickup,
        "notes": notes,
        "status": status,
    }

    try:
        booking = booking_service.get_booking(db, booking_id)
        data = BookingUpdate(**form)
        booking_service.update_booking(db, booking_id, data, feed=feed)
    except NotFound as e:
        return flash_error(request.url_for("admin_bookings"), e.message)
    except ValidationError as e:
        failure = ValidationFailed.from_pydantic(e)
        return render_booking_form(
            request, db, booking=booking, form=form, errors=failure.errors, status_code=400
        )
    except PersistenceError as e:
        return flash_error(request.url_for("admin_booking_edit_page", booking_id=booking_id), e.message)

    return flash_redirect(request.url_for("admin_bookings"), "Booking has been updated.")


@router.post("/bookings/{booking_id}/status", name="admin_booking_status")
def admin_booking_status(
    booking_id: int,
    request: Request,
    status: str = Form(...),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        booking_service.set_booking_status(db, booking_id, status, feed=feed)
    except (NotFound, ValidationFailed, PersistenceError) as e:
        return flash_error(request.url_for("admin_bookings"), e.message)

    return flash_redirect(request.url_for("admin_bookings"), f"Booking marked {status}.")


@router.post("/bookings/{booking_id}/delete", name="admin_booking_delete")
def admin_booking_delete(
    booking_id: int,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    current_user: User = Depends(admin_only),
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        booking_service.delete_booking(db, booking_id, feed=feed)
    except (NotFound, PersistenceError) as e:
        return flash_error(request.url_for("admin_bookings"), e.message)

    return flash_redirect(request.url_for("admin_bookings"), "Booking has been deleted.", category="warning")


# =================================================
# REALTIME
# =================================================
@router.websocket("/bookings/changes")
async def admin_booking_changes(
    websocket: WebSocket,
    sessions: sessionmaker = Depends(get_session_factory),
    feed: ChangeFeed = Depends(get_change_feed),
):
    admin_email = await run_in_threadpool(websocket_admin, websocket, sessions)

    if admin_email is None:
        await websocket.close(code=1008)
        return

    queue = feed.subscribe(booking_service.ENTITY)
    receiver = None
    try:
        await websocket.accept()
        logger.info("Admin %s listening for booking changes", admin_email)

        receiver = asyncio.ensure_future(websocket.receive_text())
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                await websocket.send_json(getter.result())
            else:
                getter.cancel()
            if receiver in done:
                # client messages are ignored; receiving only detects the disconnect
                receiver.result()
                receiver = asyncio.ensure_future(websocket.receive_text())
    except WebSocketDisconnect:
        pass
    finally:
        if receiver is not None:
            receiver.cancel()
        feed.unsubscribe(booking_service.ENTITY, queue)
        logger.info("Admin %s stopped listening for booking changes", admin_email)

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sortie.auth.dependencies import admin_only
from sortie.core.templates import templates
from sortie.database.session import get_db
from sortie.models.user import User
from sortie.schemas.gallery import GalleryUpload
from sortie.services import gallery_service
from sortie.services.errors import NotFound, PersistenceError
from sortie.services.storage_service import FileStorage, StorageError, get_storage
from sortie.utils.file_upload import is_image, save_file
from sortie.utils.flash import flash_error, flash_redirect

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/gallery", tags=["Gallery"])


@router.get("", response_class=HTMLResponse, name="admin_gallery")
def gallery_list(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    try:
        images = gallery_service.list_images(db)
    except PersistenceError as e:
        logger.error("Error fetching gallery items: %s", e)
        images = []

    return templates.TemplateResponse(
        request,
        "admin/gallery/list.html",
        {"images": images}
    )


@router.post("/upload", name="admin_gallery_upload")
def gallery_upload(
    request: Request,
    title: str = Form(""),
    file: UploadFile = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    list_url = request.url_for("admin_gallery")

    try:
        data = GalleryUpload(title=title)
    except ValidationError:
        return flash_error(list_url, "Please select a file and enter a title")

    if not file or not file.filename:
        return flash_error(list_url, "Please select a file and enter a title")
    if not is_image(file.filename):
        return flash_error(list_url, f"{file.filename} is not an image")

    try:
        image_url = save_file(storage, file, current_user.id)
    except StorageError as e:
        logger.error("Error uploading image: %s", e)
        return flash_error(list_url, "Failed to upload image")

    try:
        gallery_service.add_image(db, data.title, image_url)
    except PersistenceError as e:
        logger.error("Error saving gallery row: %s", e)
        # nothing references the file we just stored
        key = storage.key_from_url(image_url)
        try:
            storage.remove([key])
        except StorageError as cleanup_error:
            logger.warning("Orphaned upload %s: %s", key, cleanup_error)
        return flash_error(list_url, e.message)

    return flash_redirect(list_url, "Image uploaded successfully!")


@router.post("/{image_id}/delete", name="admin_gallery_delete")
def gallery_delete(
    image_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    list_url = request.url_for("admin_gallery")

    try:
        cleaned = gallery_service.delete_image(db, storage, image_id)
    except (NotFound, PersistenceError) as e:
        return flash_error(list_url, e.message)

    if not cleaned:
        return flash_redirect(
            list_url,
            "Image deleted, but its file could not be removed from storage.",
            category="warning",
        )

    return flash_redirect(list_url, "Image deleted successfully!")


@router.post("/{image_id}/feature", name="admin_gallery_feature")
def gallery_feature(
    image_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    list_url = request.url_for("admin_gallery")

    try:
        gallery_service.set_featured(db, image_id)
    except (NotFound, PersistenceError) as e:
        logger.error("Error setting featured image: %s", e)
        return flash_error(list_url, "Failed to set featured image")

    return flash_redirect(list_url, "Image set as featured for home page!")


@router.post("/{image_id}/unfeature", name="admin_gallery_unfeature")
def gallery_unfeature(
    image_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    if isinstance(current_user, RedirectResponse):
        return current_user

    list_url = request.url_for("admin_gallery")

    try:
        gallery_service.remove_featured(db, image_id)
    except (NotFound, PersistenceError) as e:
        logger.error("Error removing featured image: %s", e)
        return flash_error(list_url, "Failed to remove featured image")

    return flash_redirect(list_url, "Featured image removed from home page!")

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sortie.models.gallery_image import GalleryImage
from sortie.services.errors import NotFound, PersistenceError
from sortie.services.storage_service import FileStorage, StorageError

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e


def list_images(db: Session, limit: Optional[int] = None) -> List[GalleryImage]:
    query = db.query(GalleryImage).order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
    if limit:
        query = query.limit(limit)
    try:
        return query.all()
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


def get_image(db: Session, image_id: int) -> GalleryImage:
    image = db.get(GalleryImage, image_id)
    if not image:
        raise NotFound("Image not found")
    return image


def get_featured(db: Session) -> Optional[GalleryImage]:
    return (
        db.query(GalleryImage)
        .filter(GalleryImage.is_featured == True)  # noqa: E712
        .order_by(GalleryImage.id.desc())
        .first()
    )


def add_image(db: Session, title: str, image_url: str) -> GalleryImage:
    image = GalleryImage(title=title, image_url=image_url)
    db.add(image)
    _commit(db)
    db.refresh(image)
    logger.info("Gallery image %s added: %s", image.id, image.title)
    return image


def delete_image(db: Session, storage: FileStorage, image_id: int) -> bool:
    """Delete the row, then try to delete the stored file.

    The row is gone even when the file cannot be removed; the return value
    tells the caller whether cleanup succeeded so it can say so.
    """
    image = get_image(db, image_id)
    image_url = image.image_url

    db.delete(image)
    _commit(db)
    logger.info("Gallery image %s deleted", image_id)

    key = storage.key_from_url(image_url)
    if key is None:
        return True

    try:
        storage.remove([key])
    except StorageError as e:
        logger.warning("Gallery image %s: file %s left behind: %s", image_id, key, e)
        return False
    return True


def set_featured(db: Session, image_id: int) -> GalleryImage:
    """Make ``image_id`` the only featured image.

    Clearing the others and flagging the target share one transaction, so a
    failure leaves the previous featured image in place.
    """
    image = get_image(db, image_id)

    try:
        (
            db.query(GalleryImage)
            .filter(GalleryImage.id != image_id, GalleryImage.is_featured == True)  # noqa: E712
            .update({GalleryImage.is_featured: False}, synchronize_session=False)
        )
        image.is_featured = True
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e

    db.refresh(image)
    logger.info("Gallery image %s is now featured", image_id)
    return image


def remove_featured(db: Session, image_id: int) -> GalleryImage:
    image = get_image(db, image_id)
    image.is_featured = False
    _commit(db)
    db.refresh(image)
    return image

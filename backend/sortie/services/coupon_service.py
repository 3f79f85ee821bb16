import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sortie.models.coupon import Coupon
from sortie.schemas.coupon import CouponCreate, CouponUpdate
from sortie.services.errors import NotFound, PersistenceError
from sortie.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class CouponRejection(str, enum.Enum):
    EMPTY_CODE = "empty_code"
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"


REJECTION_MESSAGES = {
    CouponRejection.EMPTY_CODE: "Please enter a coupon code.",
    CouponRejection.NOT_FOUND: "Invalid or expired coupon.",
    CouponRejection.INACTIVE: "This coupon is no longer active.",
    CouponRejection.EXPIRED: "This coupon has expired.",
}


@dataclass(frozen=True)
class CouponCheck:
    code: Optional[str] = None
    discount: int = 0
    reason: Optional[CouponRejection] = None

    @property
    def valid(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        if self.reason is None:
            return f"Coupon applied: {self.code} ({self.discount}% off)"
        return REJECTION_MESSAGES[self.reason]


def validate_coupon(
    db: Session,
    code: Optional[str],
    now: Optional[datetime] = None,
    reveal_inactive: bool = False,
) -> CouponCheck:
    """Look a coupon code up and decide whether it can be applied right now.

    The code must match exactly, case and surrounding whitespace included.

    By default the lookup only considers active coupons, so a disabled code
    is indistinguishable from an unknown one. With ``reveal_inactive`` the
    lookup sees every coupon and a disabled one is reported as ``inactive``.
    """
    if not code or not code.strip():
        return CouponCheck(reason=CouponRejection.EMPTY_CODE)

    query = db.query(Coupon).filter(Coupon.code == code)
    if not reveal_inactive:
        query = query.filter(Coupon.is_active == True)  # noqa: E712

    try:
        coupon = query.first()
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e

    if coupon is None:
        return CouponCheck(reason=CouponRejection.NOT_FOUND)

    if not coupon.is_active:
        return CouponCheck(reason=CouponRejection.INACTIVE)

    now = as_utc(now or utcnow())
    if coupon.expires_at is not None and as_utc(coupon.expires_at) < now:
        return CouponCheck(reason=CouponRejection.EXPIRED)

    return CouponCheck(code=coupon.code, discount=coupon.discount)


# -------------------------------------------------
# Admin CRUD
# -------------------------------------------------
def list_coupons(db: Session) -> List[Coupon]:
    return db.query(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()).all()


def get_coupon(db: Session, coupon_id: int) -> Coupon:
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFound("Coupon not found")
    return coupon


def _save(db: Session, coupon: Coupon) -> Coupon:
    code = coupon.code
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise PersistenceError(f"Coupon code '{code}' already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e
    db.refresh(coupon)
    return coupon


def create_coupon(db: Session, data: CouponCreate) -> Coupon:
    coupon = Coupon(**data.model_dump())
    db.add(coupon)
    coupon = _save(db, coupon)
    logger.info("Coupon %s created (%s%%)", coupon.code, coupon.discount)
    return coupon


def update_coupon(db: Session, coupon_id: int, data: CouponUpdate) -> Coupon:
    coupon = get_coupon(db, coupon_id)
    for field, value in data.model_dump().items():
        setattr(coupon, field, value)
    return _save(db, coupon)


def delete_coupon(db: Session, coupon_id: int) -> None:
    coupon = get_coupon(db, coupon_id)
    code = coupon.code
    db.delete(coupon)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e
    logger.info("Coupon %s deleted", code)

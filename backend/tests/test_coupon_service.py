from datetime import timedelta

import pytest

from sortie.schemas.coupon import CouponCreate, CouponUpdate
from sortie.services import coupon_service
from sortie.services.coupon_service import CouponRejection, validate_coupon
from sortie.services.errors import NotFound, PersistenceError
from sortie.utils.dates import utcnow


def test_valid_coupon(db, make_coupon):
    make_coupon("SAVE10", 10)

    check = validate_coupon(db, "SAVE10")

    assert check.valid
    assert check.discount == 10
    assert check.message == "Coupon applied: SAVE10 (10% off)"


def test_code_must_match_exactly(db, make_coupon):
    make_coupon("SAVE10", 10)

    assert validate_coupon(db, "SAVE10").valid
    assert validate_coupon(db, "  SAVE10 ").reason == CouponRejection.NOT_FOUND
    assert validate_coupon(db, "save10").reason == CouponRejection.NOT_FOUND


@pytest.mark.parametrize("code", ["", "   ", None])
def test_empty_code(db, code):
    assert validate_coupon(db, code).reason == CouponRejection.EMPTY_CODE


def test_unknown_code(db):
    check = validate_coupon(db, "NOPE")
    assert not check.valid
    assert check.reason == CouponRejection.NOT_FOUND
    assert check.discount == 0


def test_inactive_coupon_looks_unknown_by_default(db, make_coupon):
    make_coupon("OFF", 15, is_active=False)

    assert validate_coupon(db, "OFF").reason == CouponRejection.NOT_FOUND
    assert validate_coupon(db, "OFF", reveal_inactive=True).reason == CouponRejection.INACTIVE


def test_expired_coupon(db, make_coupon):
    now = utcnow()
    make_coupon("OLD", 20, expires_at=now - timedelta(days=1))

    check = validate_coupon(db, "OLD", now=now)

    assert check.reason == CouponRejection.EXPIRED
    assert check.message == "This coupon has expired."


def test_coupon_expiring_exactly_now_is_still_valid(db, make_coupon):
    now = utcnow().replace(microsecond=0)
    make_coupon("EDGE", 5, expires_at=now)

    assert validate_coupon(db, "EDGE", now=now).valid
    assert not validate_coupon(db, "EDGE", now=now + timedelta(seconds=1)).valid


def test_create_update_delete(db):
    coupon = coupon_service.create_coupon(db, CouponCreate(code=" SUMMER ", discount=30))
    assert coupon.code == "SUMMER"
    assert coupon.is_active

    coupon_service.update_coupon(
        db, coupon.id, CouponUpdate(code="SUMMER", discount=35, is_active=False)
    )
    assert coupon_service.get_coupon(db, coupon.id).discount == 35

    coupon_id = coupon.id
    coupon_service.delete_coupon(db, coupon_id)
    with pytest.raises(NotFound):
        coupon_service.get_coupon(db, coupon_id)


def test_duplicate_code_is_rejected(db, make_coupon):
    make_coupon("SAVE10", 10)

    with pytest.raises(PersistenceError) as exc:
        coupon_service.create_coupon(db, CouponCreate(code="SAVE10", discount=50))

    assert "already exists" in exc.value.message
    assert len(coupon_service.list_coupons(db)) == 1


def test_discount_bounds_are_validated():
    with pytest.raises(ValueError):
        CouponCreate(code="BIG", discount=150)


def test_validation_is_repeatable(db, make_coupon):
    make_coupon("SAVE20", 20)
    now = utcnow()

    assert validate_coupon(db, "SAVE20", now=now) == validate_coupon(db, "SAVE20", now=now)


def test_expired_coupon_gives_no_discount(db, make_coupon):
    make_coupon("OLD10", 10, expires_at=utcnow() - timedelta(days=30))

    check = validate_coupon(db, "OLD10")

    assert check.reason == CouponRejection.EXPIRED
    assert check.discount == 0

from sortie.models.booking import Booking
from sortie.models.coupon import Coupon
from sortie.models.gallery_image import GalleryImage
from sortie.models.trip import Trip
from sortie.models.user import User

__all__ = ["Booking", "Coupon", "GalleryImage", "Trip", "User"]

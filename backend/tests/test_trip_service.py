from decimal import Decimal

import pytest

from sortie.schemas.trip import TripCreate, TripUpdate, parse_price, split_features
from sortie.services import trip_service
from sortie.services.errors import NotFound


def test_split_features():
    assert split_features("Camel trekking, , Desert camping ,") == ["Camel trekking", "Desert camping"]
    assert split_features("") == []


def test_parse_price_falls_back_to_zero():
    assert parse_price("12500.50") == Decimal("12500.50")
    assert parse_price("abc") == Decimal("0")


def test_unknown_region_is_rejected():
    with pytest.raises(ValueError):
        TripCreate(title="X", description="Y", destination="Z", region="east")


def test_catalog_only_lists_available_trips(db, make_trip):
    make_trip(title="Hidden", is_available=False)
    visible = make_trip(title="Visible")

    catalog = trip_service.load_catalog(db)

    assert [card.name for card in catalog] == ["Visible"]
    assert catalog[0].id == visible.id
    assert catalog[0].image == "/static/img/placeholder.svg"


def test_search_matches_name_destination_and_features(db, make_trip):
    make_trip(title="Sahara Expedition", destination="Djanet", region="south", features=["Camel trekking"])
    make_trip(title="Coastal Escape", destination="Béjaïa", region="coast", features=["Snorkeling"])
    catalog = trip_service.load_catalog(db)

    def names(term=None, region=None):
        return sorted(card.name for card in trip_service.search_trips(catalog, term, region))

    assert names("sahara") == ["Sahara Expedition"]
    assert names("DJANET") == ["Sahara Expedition"]
    assert names("snork") == ["Coastal Escape"]
    assert names(region="coast") == ["Coastal Escape"]
    assert names("camel", "coast") == []
    assert names(region="all") == ["Coastal Escape", "Sahara Expedition"]


def test_create_update_delete(db):
    data = TripCreate(
        title="Tassili Trek",
        description="Rock art and canyons",
        destination="Tassili n'Ajjer",
        region="south",
        price=Decimal("42000"),
        features=["Guide"],
    )
    trip = trip_service.create_trip(db, data, image="/static/uploads/trips/1/t.jpg")
    assert trip.image == "/static/uploads/trips/1/t.jpg"

    update = TripUpdate(**{**data.model_dump(), "price": Decimal("39000"), "is_available": False})
    trip_service.update_trip(db, trip.id, update)

    stored = trip_service.get_trip(db, trip.id)
    assert stored.price == Decimal("39000")
    assert not stored.is_available
    assert stored.image == "/static/uploads/trips/1/t.jpg"

    trip_id = trip.id
    trip_service.delete_trip(db, trip_id)
    with pytest.raises(NotFound):
        trip_service.get_trip(db, trip_id)

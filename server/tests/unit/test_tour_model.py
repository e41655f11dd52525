"""Unit tests for the tour insert hook."""

from datetime import datetime, timedelta, timezone

from tours_api.models.tour import prepare_tour, slugify


def test_slugify():
    assert slugify("The Forest Hiker") == "the-forest-hiker"
    assert slugify("  Sea & Sun: 2021!  ") == "sea-sun-2021"


def test_prepare_tour_stamps_naive_utc_creation_time():
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    document = prepare_tour({"name": "The Forest Hiker"})

    assert document["slug"] == "the-forest-hiker"
    assert document["createdAt"].tzinfo is None
    assert abs(document["createdAt"] - now) < timedelta(seconds=5)


def test_prepare_tour_keeps_given_creation_time():
    created = datetime(2021, 1, 1)

    document = prepare_tour({"name": "The Forest Hiker", "createdAt": created})

    assert document["createdAt"] == created

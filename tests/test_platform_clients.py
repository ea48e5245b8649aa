"""
Tests for the Google Places, Yelp and TripAdvisor clients against mocked HTTP.
"""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from api.base_client import join_address
from api.google_places_client import GooglePlacesClient
from api.tripadvisor_client import TripAdvisorClient
from api.yelp_client import YelpClient
from models.errors import ErrorKind, ReviewImportError
from models.review import Platform, to_epoch_ms


def _client(cls, handler, sleep, **kwargs):
    return cls("test-key", transport=httpx.MockTransport(handler), sleep=sleep, **kwargs)


def _epoch_ms(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


def test_join_address_skips_empty_parts():
    assert join_address("1 Main St", None, "", "Springfield", " IL ") == "1 Main St, Springfield, IL"
    assert join_address(None, "") == ""


def test_to_epoch_ms_treats_naive_as_utc():
    assert to_epoch_ms(datetime(2023, 1, 15, 10, 30)) == _epoch_ms(2023, 1, 15, 10, 30)
    assert to_epoch_ms(datetime(2023, 1, 15, 10, 30, tzinfo=timezone.utc)) == _epoch_ms(
        2023, 1, 15, 10, 30
    )


@pytest.mark.parametrize("cls", [GooglePlacesClient, YelpClient, TripAdvisorClient])
@pytest.mark.parametrize("key", [None, "", "   "])
def test_missing_key_is_config_error(cls, key):
    with pytest.raises(ReviewImportError) as exc_info:
        cls(key)

    assert exc_info.value.kind is ErrorKind.CONFIG_ERROR
    assert exc_info.value.platform == cls.platform.value


# -------------------------------------------------------------------
# Google Places
# -------------------------------------------------------------------


class GoogleHandler:
    def __init__(self, failing_place: str | None = None):
        self.failing_place = failing_place
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/findplacefromtext/json"):
            return httpx.Response(
                200,
                json={
                    "status": "OK",
                    "candidates": [
                        {
                            "place_id": "g1",
                            "name": "Blue Bottle",
                            "formatted_address": "1 Main St, Oakland, CA",
                            "rating": 4.6,
                        },
                        {"place_id": "g2", "name": "Philz", "formatted_address": "2 Side St"},
                    ],
                },
            )

        place_id = request.url.params["place_id"]
        if place_id == self.failing_place:
            return httpx.Response(500, json={})
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "result": {
                    "url": f"https://maps.google.com/?cid={place_id}",
                    "reviews": [
                        {
                            "author_name": "Ann",
                            "text": "Best pour-over in town",
                            "rating": 5,
                            "time": 1_700_000_000,
                            "author_url": "https://www.google.com/maps/contrib/1",
                            "profile_photo_url": "https://lh3.googleusercontent.com/a.png",
                        },
                        {"author_name": "Bob", "text": "", "rating": 3, "time": 1},
                    ],
                },
            },
        )


def test_google_maps_reviews_and_passes_key(sleep_recorder):
    handler = GoogleHandler()
    client = _client(GooglePlacesClient, handler, sleep_recorder)

    results = asyncio.run(client.search_businesses("blue bottle"))

    assert [r.place_id for r in results] == ["g1", "g2"]
    first = results[0]
    assert first.platform is Platform.GOOGLE
    assert first.address == "1 Main St, Oakland, CA"
    assert first.rating == 4.6
    assert first.url == "https://maps.google.com/?cid=g1"
    assert results[1].rating is None

    # the review with empty text is skipped
    assert len(first.reviews) == 1
    review = first.reviews[0]
    assert review.author_name == "Ann"
    assert review.content == "Best pour-over in town"
    assert review.time == 1_700_000_000_000
    assert review.profile_url == "https://www.google.com/maps/contrib/1"
    assert review.profile_photo_url == "https://lh3.googleusercontent.com/a.png"
    assert review.review_url == "https://search.google.com/local/reviews?placeid=g1"

    search_request = handler.requests[0]
    assert search_request.url.params["input"] == "blue bottle"
    assert search_request.url.params["key"] == "test-key"


def test_google_drops_place_whose_details_fail(sleep_recorder):
    client = _client(GooglePlacesClient, GoogleHandler(failing_place="g1"), sleep_recorder)

    results = asyncio.run(client.search_businesses("coffee"))

    assert [r.place_id for r in results] == ["g2"]


def test_google_denied_status_is_api_error(sleep_recorder):
    def handler(request):
        return httpx.Response(
            200, json={"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}
        )

    client = _client(GooglePlacesClient, handler, sleep_recorder)

    with pytest.raises(ReviewImportError) as exc_info:
        asyncio.run(client.search_businesses("coffee"))

    assert exc_info.value.kind is ErrorKind.API_ERROR
    assert "REQUEST_DENIED" in exc_info.value.message


def test_search_is_capped_to_max_places(sleep_recorder):
    def handler(request):
        if request.url.path.endswith("/findplacefromtext/json"):
            candidates = [{"place_id": f"g{i}", "name": f"P{i}"} for i in range(8)]
            return httpx.Response(200, json={"status": "OK", "candidates": candidates})
        return httpx.Response(200, json={"status": "OK", "result": {"reviews": []}})

    client = _client(GooglePlacesClient, handler, sleep_recorder, max_places=3)

    results = asyncio.run(client.search_businesses("coffee"))

    assert [r.place_id for r in results] == ["g0", "g1", "g2"]


# -------------------------------------------------------------------
# Yelp
# -------------------------------------------------------------------


def yelp_handler(request: httpx.Request) -> httpx.Response:
    assert request.headers["Authorization"] == "Bearer test-key"
    if request.url.path.endswith("/businesses/search"):
        return httpx.Response(
            200,
            json={
                "businesses": [
                    {
                        "id": "y1",
                        "name": "Sightglass",
                        "location": {
                            "address1": "270 7th St",
                            "city": "San Francisco",
                            "state": "CA",
                            "zip_code": "94103",
                        },
                        "rating": 4.5,
                        "url": "https://www.yelp.com/biz/sightglass",
                    }
                ]
            },
        )
    return httpx.Response(
        200,
        json={
            "reviews": [
                {
                    "id": "r1",
                    "user": {
                        "name": "Carla",
                        "profile_url": "https://www.yelp.com/user_details?userid=c",
                        "image_url": "https://s3-media.yelpcdn.com/c.jpg",
                    },
                    "text": "Great espresso",
                    "rating": 4,
                    "time_created": "2023-01-15 10:30:00",
                    "url": "https://www.yelp.com/biz/sightglass?hrid=r1",
                }
            ]
        },
    )


def test_yelp_maps_business_and_reviews(sleep_recorder):
    client = _client(YelpClient, yelp_handler, sleep_recorder)

    results = asyncio.run(client.search_businesses("sightglass"))

    assert len(results) == 1
    result = results[0]
    assert result.platform is Platform.YELP
    assert result.address == "270 7th St, San Francisco, CA, 94103"
    assert result.url == "https://www.yelp.com/biz/sightglass"

    review = result.reviews[0]
    assert review.author_name == "Carla"
    assert review.rating == 4
    assert review.time == _epoch_ms(2023, 1, 15, 10, 30)
    assert review.profile_url == "https://www.yelp.com/user_details?userid=c"
    assert review.profile_photo_url == "https://s3-media.yelpcdn.com/c.jpg"
    assert review.review_url == "https://www.yelp.com/biz/sightglass?hrid=r1"


def test_yelp_malformed_search_payload_is_api_error(sleep_recorder):
    def handler(request):
        return httpx.Response(200, json={"businesses": [{"name": "no id"}]})

    client = _client(YelpClient, handler, sleep_recorder)

    with pytest.raises(ReviewImportError) as exc_info:
        asyncio.run(client.search_businesses("coffee"))

    assert exc_info.value.kind is ErrorKind.API_ERROR


def test_yelp_search_rate_limit_exhaustion_propagates(sleep_recorder):
    def handler(request):
        return httpx.Response(429, json={"error": {"code": "TOO_MANY_REQUESTS_PER_SECOND"}})

    client = _client(YelpClient, handler, sleep_recorder)

    with pytest.raises(ReviewImportError) as exc_info:
        asyncio.run(client.search_businesses("coffee"))

    assert exc_info.value.status_code == 429
    assert sleep_recorder.delays == [1.0, 2.0]


def _yelp_review(text: str, time_created: str) -> dict:
    return {
        "user": {"name": "Dana"},
        "text": text,
        "rating": 5,
        "time_created": time_created,
    }


def test_yelp_drops_place_whose_reviews_response_cannot_be_decoded(sleep_recorder):
    def handler(request):
        if request.url.path.endswith("/businesses/search"):
            return httpx.Response(
                200, json={"businesses": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]}
            )
        if request.url.path == "/v3/businesses/a/reviews":
            raise httpx.DecodingError("bad gzip", request=request)
        return httpx.Response(
            200, json={"reviews": [_yelp_review("Lovely", "2023-01-15 10:30:00")]}
        )

    client = _client(YelpClient, handler, sleep_recorder)

    results = asyncio.run(client.search_businesses("coffee"))

    assert [r.place_id for r in results] == ["b"]
    assert results[0].reviews[0].content == "Lovely"


@pytest.mark.parametrize(
    "time_created",
    ["2023-01-15T12:30:00+0200", "2023-01-15T12:30:00+02:00", "2023-01-15T10:30:00Z"],
)
def test_yelp_review_offsets_are_normalized_to_utc(sleep_recorder, time_created):
    def handler(request):
        if request.url.path.endswith("/businesses/search"):
            return httpx.Response(200, json={"businesses": [{"id": "a", "name": "A"}]})
        return httpx.Response(200, json={"reviews": [_yelp_review("Lovely", time_created)]})

    client = _client(YelpClient, handler, sleep_recorder)

    results = asyncio.run(client.search_businesses("coffee"))

    assert results[0].reviews[0].time == _epoch_ms(2023, 1, 15, 10, 30)


# -------------------------------------------------------------------
# TripAdvisor
# -------------------------------------------------------------------


def tripadvisor_handler(request: httpx.Request) -> httpx.Response:
    assert request.headers["X-TripAdvisor-API-Key"] == "test-key"
    if request.url.path.endswith("/location/search"):
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "location_id": "t1",
                        "name": "Cafe Central",
                        "address_obj": {
                            "street1": "Herrengasse 14",
                            "city": "Vienna",
                            "postalcode": "1010",
                            "country": "Austria",
                        },
                        "rating": 4.5,
                        "web_url": "https://www.tripadvisor.com/Restaurant_Review-t1",
                    }
                ]
            },
        )
    return httpx.Response(
        200,
        json={
            "data": [
                {
                    "user": {
                        "username": "traveler42",
                        "user_id": "42",
                        "avatar": {"small": {"url": "https://media.tacdn.com/42.jpg"}},
                    },
                    "text": "Historic and delicious",
                    "rating": 5,
                    "published_date": "2023-06-01T08:00:00Z",
                    "url": "https://www.tripadvisor.com/ShowUserReviews-t1-r9",
                },
                {
                    "user": {"username": "anon"},
                    "text": "Fine",
                    "rating": 3,
                    "published_date": "2023-06-02T08:00:00Z",
                },
            ]
        },
    )


def test_tripadvisor_maps_location_and_reviews(sleep_recorder):
    client = _client(TripAdvisorClient, tripadvisor_handler, sleep_recorder)

    results = asyncio.run(client.search_businesses("cafe central"))

    result = results[0]
    assert result.platform is Platform.TRIPADVISOR
    assert result.address == "Herrengasse 14, Vienna, 1010, Austria"
    assert result.url == "https://www.tripadvisor.com/Restaurant_Review-t1"

    first, second = result.reviews
    assert first.author_name == "traveler42"
    assert first.time == _epoch_ms(2023, 6, 1, 8, 0)
    assert first.profile_url == "https://www.tripadvisor.com/Profile/42"
    assert first.profile_photo_url == "https://media.tacdn.com/42.jpg"
    assert first.review_url == "https://www.tripadvisor.com/ShowUserReviews-t1-r9"
    assert second.profile_url is None
    assert second.profile_photo_url is None

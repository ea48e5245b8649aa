import pytest

from models.errors import ErrorKind, ReviewImportError
from models.review import MAX_TIME_MS, Platform, Review
from orchestrator.review_validator import validate_review


def _raw(**overrides):
    raw = {
        "author_name": "Jane Doe",
        "content": "Lovely place.",
        "rating": 4,
        "time": 1_700_000_000_000,
        "platform": "yelp",
        "profile_url": "https://www.yelp.com/user_details?userid=abc",
        "profile_photo_url": None,
        "review_url": "https://www.yelp.com/biz/cafe?hrid=xyz",
    }
    raw.update(overrides)
    return raw


def test_well_formed_review_round_trips():
    raw = _raw()

    review = validate_review(raw)

    assert isinstance(review, Review)
    assert review.platform is Platform.YELP
    assert review.to_dict() == raw


def test_review_instance_is_accepted():
    review = Review(
        author_name="A",
        content="B",
        rating=5,
        time=1,
        platform=Platform.GOOGLE,
    )
    assert validate_review(review) == review


def test_camel_case_keys_are_accepted():
    review = validate_review(
        {
            "authorName": "Jane",
            "content": "Nice",
            "rating": 5,
            "time": 1,
            "platform": "tripadvisor",
            "profileUrl": "https://www.tripadvisor.com/Profile/42",
            "reviewUrl": "https://www.tripadvisor.com/r/1",
        }
    )

    assert review.author_name == "Jane"
    assert review.profile_url == "https://www.tripadvisor.com/Profile/42"
    assert review.review_url == "https://www.tripadvisor.com/r/1"


def test_numeric_string_rating_is_coerced():
    assert validate_review(_raw(rating="3")).rating == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"rating": 0},
        {"rating": 6},
        {"rating": 4.5},
        {"content": ""},
        {"content": "   "},
        {"author_name": ""},
        {"platform": "facebook"},
        {"time": "yesterday"},
        {"rating": True},
        {"rating": False},
        {"time": True},
        {"time": -1},
        {"time": MAX_TIME_MS + 1},
        {"time": 10**18},
    ],
)
def test_invalid_fields_raise_invalid_review(overrides):
    with pytest.raises(ReviewImportError) as exc_info:
        validate_review(_raw(**overrides))

    assert exc_info.value.kind is ErrorKind.INVALID_REVIEW
    assert exc_info.value.message.startswith("Invalid review data")


@pytest.mark.parametrize("missing", ["author_name", "content", "rating", "time", "platform"])
def test_missing_required_field_raises(missing):
    raw = _raw()
    del raw[missing]

    with pytest.raises(ReviewImportError) as exc_info:
        validate_review(raw)

    assert exc_info.value.kind is ErrorKind.INVALID_REVIEW


def test_non_object_raises():
    with pytest.raises(ReviewImportError) as exc_info:
        validate_review(["not", "a", "review"])

    assert exc_info.value.kind is ErrorKind.INVALID_REVIEW
    assert exc_info.value.details["received_type"] == "list"


def test_latest_representable_time_is_accepted():
    assert validate_review(_raw(time=MAX_TIME_MS)).time == MAX_TIME_MS

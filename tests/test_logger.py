import json
import logging

from utils.logger import JsonFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="orchestrator.review_import",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="yelp service not available: %s",
        args=("Yelp API key is not configured",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_core_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "WARNING"
    assert payload["service"] == "review-import"
    assert payload["logger"] == "orchestrator.review_import"
    assert payload["message"] == "yelp service not available: Yelp API key is not configured"
    assert payload["timestamp"].endswith("Z")


def test_json_formatter_merges_extra_fields():
    payload = json.loads(
        JsonFormatter().format(_record(extra_fields={"platform": "yelp", "attempt": 2}))
    )

    assert payload["platform"] == "yelp"
    assert payload["attempt"] == 2

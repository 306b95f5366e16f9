"""Tests for mapping upstream Notion errors onto HTTP errors."""

import pytest

from notion_desk.notion.errors import bad_request, error_detail, upstream_error


def test_error_detail_omits_missing_fields():
    """Only the fields that are given appear in the error body."""
    assert error_detail("Boom") == {"error": "Boom"}
    assert error_detail("Boom", "msg", code="x") == {"error": "Boom", "message": "msg", "code": "x"}


def test_bad_request_is_400():
    """bad_request builds a 400 with the error headline."""
    exc = bad_request("Invalid JSON body")

    assert exc.status_code == 400
    assert exc.detail == {"error": "Invalid JSON body"}


@pytest.mark.parametrize(
    ("code", "expected_status"),
    [
        ("object_not_found", 404),
        ("unauthorized", 401),
        ("restricted_resource", 403),
        ("rate_limited", 429),
        ("validation_error", 400),
    ],
)
def test_known_codes_map_to_status(notion_error, code, expected_status):
    """Known Notion error codes map to distinguishable statuses."""
    exc = upstream_error(notion_error(code, "upstream says no"))

    assert exc.status_code == expected_status
    assert exc.detail["message"] == "upstream says no"
    assert exc.detail["code"] == code


def test_not_found_override_keeps_upstream_details(notion_error):
    """A not-found override replaces the message and keeps the upstream text as details."""
    exc = upstream_error(
        notion_error("object_not_found", "Could not find data source"),
        not_found_message="Database not found or inaccessible",
    )

    assert exc.status_code == 404
    assert exc.detail["message"] == "Database not found or inaccessible"
    assert exc.detail["details"] == "Could not find data source"


def test_unknown_code_keeps_upstream_status(notion_error):
    """Unknown codes keep the upstream status and a generic headline."""
    exc = upstream_error(notion_error("service_unavailable", "Try later", status=503))

    assert exc.status_code == 503
    assert exc.detail["error"] == "Notion API error"
    assert exc.detail["message"] == "Try later"

"""
Tests for survey response ingestion over HTTP (POST /api/responses).
"""

from __future__ import annotations

import pytest

REQUIRED = ["respondent_id", "location", "category", "timeline", "answers"]


def test_valid_response_is_created(client, store, valid_response):
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 201
    body = r.json()
    for field in REQUIRED:
        assert body[field] == valid_response[field]
    assert body["id"]
    assert body["created_at"]
    assert store.responses.all() == [body]


def test_answers_keep_submitted_order(client, valid_response):
    valid_response["answers"] = {"q3": 1, "q1": 2, "q2": 3}
    r = client.post("/api/responses", json=valid_response)
    assert list(r.json()["answers"]) == ["q3", "q1", "q2"]


@pytest.mark.parametrize("field", REQUIRED)
def test_missing_field_is_rejected_without_side_effect(client, store, valid_response, field):
    del valid_response[field]
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}
    assert store.responses.all() == []


@pytest.mark.parametrize(
    "field, value",
    [
        ("location", ""),
        ("category", "   "),
        ("timeline", None),
        ("answers", {}),
        ("answers", False),
        ("answers", 0),
        ("respondent_id", 0),
        ("respondent_id", 0.0),
    ],
)
def test_blank_field_is_rejected(client, store, valid_response, field, value):
    valid_response[field] = value
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 400
    assert "error" in r.json()
    assert store.responses.all() == []


def test_identical_submissions_create_distinct_records(client, store, valid_response):
    first = client.post("/api/responses", json=valid_response).json()
    second = client.post("/api/responses", json=valid_response).json()
    assert first["id"] != second["id"]
    assert len(store.responses.all()) == 2


def test_extra_fields_are_not_stored(client, valid_response):
    valid_response["unexpected"] = "value"
    body = client.post("/api/responses", json=valid_response).json()
    assert "unexpected" not in body


def test_numeric_respondent_id_is_stored_as_text(client, valid_response):
    valid_response["respondent_id"] = 42
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 201
    assert r.json()["respondent_id"] == "42"


def test_non_object_body_is_rejected(client, store):
    r = client.post("/api/responses", json=["not", "an", "object"])
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}
    assert store.responses.all() == []


def test_storage_failure_returns_500(client, store, valid_response, monkeypatch):
    from riskviz_dashboard.errors import StorageError

    def fail(record):
        raise StorageError("disk full")

    monkeypatch.setattr(store.responses, "insert", fail)
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 500
    assert r.json() == {"error": "Storage error"}


def test_list_responses(client, valid_response):
    client.post("/api/responses", json=valid_response)
    r = client.get("/api/responses")
    assert r.status_code == 200
    assert len(r.json()) == 1


def test_unvalidated_root_path_is_not_mounted(client, valid_response):
    r = client.post("/responses", json=valid_response)
    assert r.status_code in (404, 405)
    assert "error" in r.json()


def test_unstorable_field_type_is_rejected(client, store, valid_response):
    valid_response["location"] = {"lat": 1.0, "lon": 2.0}
    r = client.post("/api/responses", json=valid_response)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}
    assert store.responses.all() == []


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_answers_are_rejected_without_storing(client, store, literal):
    body = (
        '{"respondent_id": "R", "location": "L", "category": "C", "timeline": "T", '
        f'"answers": {{"q": [1, {{"nested": {literal}}}]}}}}'
    )
    r = client.post("/api/responses", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}
    assert store.responses.all() == []
    assert client.get("/api/responses").status_code == 200

"""Tests for the exception-to-response mapping."""

from datetime import date

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from schoolplan.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    FieldValidationError,
    InvalidFilterError,
    RecordNotFoundError,
    RelatedRecordNotFoundError,
)
from schoolplan.utils.exception_handlers import register_exception_handlers

RAISED = {
    "field": FieldValidationError(
        {"end_time": ["end_time must be after start_time"]}
    ),
    "related": RelatedRecordNotFoundError("subject_id", 42),
    "missing": RecordNotFoundError("WeeklySlot", 7),
    "duplicate": DuplicateRecordError(
        "MonthlyPlanEntry",
        key={"plan_date": date(2025, 9, 10), "degree_id": 1, "sequence": 2},
    ),
    "filter": InvalidFilterError("Invalid filter key 'colour'"),
    "database": DatabaseConnectionError("password authentication failed"),
    "crash": RuntimeError("unexpected"),
}


@pytest.fixture
async def error_client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise RAISED[name]

    @app.get("/typed/{value}")
    async def typed(value: int):
        return {"value": value}

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, status_code, error",
    [
        ("field", 422, "Validation Error"),
        ("related", 422, "Validation Error"),
        ("missing", 404, "Not Found"),
        ("duplicate", 409, "Conflict"),
        ("filter", 400, "Bad Request"),
        ("database", 503, "Service Unavailable"),
        ("crash", 500, "Internal Server Error"),
    ],
)
async def test_status_mapping(error_client: AsyncClient, name, status_code, error):
    """Test: Each application error maps to its status code and error name."""
    response = await error_client.get(f"/raise/{name}")

    assert response.status_code == status_code
    assert response.json()["error"] == error


@pytest.mark.asyncio
async def test_field_errors_are_listed(error_client: AsyncClient):
    """Test: Field errors are returned keyed by field."""
    body = (await error_client.get("/raise/field")).json()

    assert body["errors"] == {"end_time": ["end_time must be after start_time"]}


@pytest.mark.asyncio
async def test_related_record_body(error_client: AsyncClient):
    """Test: Missing references name the field and the id."""
    body = (await error_client.get("/raise/related")).json()

    assert body["field"] == "subject_id"
    assert body["record_id"] == 42
    assert "subject_id" in body["errors"]


@pytest.mark.asyncio
async def test_conflict_reports_key(error_client: AsyncClient):
    """Test: Conflicts carry the contested key, dates as ISO strings."""
    body = (await error_client.get("/raise/duplicate")).json()

    assert body["model"] == "MonthlyPlanEntry"
    assert body["key"] == {"plan_date": "2025-09-10", "degree_id": 1, "sequence": 2}


@pytest.mark.asyncio
async def test_database_detail_is_hidden(error_client: AsyncClient):
    """Test: Driver messages never reach the client."""
    body = (await error_client.get("/raise/database")).json()

    assert "password" not in body["message"]


@pytest.mark.asyncio
async def test_request_validation(error_client: AsyncClient):
    """Test: Schema validation failures are 422 with details."""
    response = await error_client.get("/typed/abc")

    assert response.status_code == 422
    assert response.json()["details"][0]["loc"] == ["path", "value"]

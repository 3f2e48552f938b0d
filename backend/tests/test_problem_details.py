from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from salesflow.domain_errors import DomainError, conflict, not_found
from salesflow.problem_details import build_problem_details_response, domain_error_handler


def test_problem_details_payload_contains_stable_code_and_rfc7807_fields() -> None:
    response = build_problem_details_response(
        DomainError(
            code="ORDER_INVALID_TRANSITION",
            http_status=409,
            message="transition not allowed",
            details={"order_id": "ORD-1"},
        )
    )

    assert response.status_code == 409
    assert response.media_type == "application/problem+json"

    body = response.body.decode("utf-8")
    assert '"type":"https://api.salesflow.local/problems/order_invalid_transition"' in body
    assert '"title":"Conflict"' in body
    assert '"status":409' in body
    assert '"detail":"transition not allowed"' in body
    assert '"code":"ORDER_INVALID_TRANSITION"' in body
    assert '"details":{"order_id":"ORD-1"}' in body


def test_error_helpers_set_status_and_details() -> None:
    missing = not_found("ORDER_NOT_FOUND", "Order not found", order_id="ORD-9")
    taken = conflict("USERNAME_TAKEN", "Username already exists")

    assert (missing.http_status, missing.details) == (404, {"order_id": "ORD-9"})
    assert taken.http_status == 409
    assert not taken.details


def test_problem_details_omits_details_when_none() -> None:
    response = build_problem_details_response(
        DomainError(
            code="NO_DETAILS",
            http_status=422,
            message="validation failed",
            details=None,
        )
    )

    body = response.body.decode("utf-8")
    assert response.status_code == 422
    assert response.media_type == "application/problem+json"
    assert '"code":"NO_DETAILS"' in body
    assert '"details"' not in body


def test_fastapi_exception_handler_maps_domain_error_to_problem_details() -> None:
    app = FastAPI()
    app.add_exception_handler(DomainError, domain_error_handler)

    @app.get("/boom")
    def _boom():
        raise DomainError(
            code="ROUTE_PROBLEM",
            http_status=409,
            message="route failed",
            details={"source": "test"},
        )

    client = TestClient(app)
    response = client.get("/boom")

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    payload = response.json()
    assert payload["code"] == "ROUTE_PROBLEM"
    assert payload["detail"] == "route failed"

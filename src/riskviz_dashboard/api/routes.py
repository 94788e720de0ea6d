"""
Survey response routes, mounted under the configured route prefix.

POST /responses validates that every Response field is present, stores the
response and returns it with status 201. Storage failures are left to the
application's exception handlers.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from riskviz_dashboard.db import Store
from riskviz_dashboard.logger import get_logger
from riskviz_dashboard.services import response_service

logger = get_logger(__name__)

router = APIRouter(tags=["Responses"])


def get_store(request: Request) -> Store:
    """Dependency: the store owned by the running server context."""
    return request.app.state.store


@router.post("/responses", status_code=201)
def create_response(payload: Dict[str, Any] = Body(...), store: Store = Depends(get_store)):
    missing = response_service.validate_response(payload)
    if missing:
        logger.info("response_rejected", missing_fields=missing)
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})
    return response_service.save_response(store, payload)


@router.get("/responses")
def list_responses(store: Store = Depends(get_store)):
    return response_service.list_responses(store)

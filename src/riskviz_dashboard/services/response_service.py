"""
Response ingestion: validate a submitted survey response and persist it.
"""

from typing import Any, Dict, List

from riskviz_dashboard.db import Store
from riskviz_dashboard.logger import get_logger
from riskviz_dashboard.models import REQUIRED_RESPONSE_FIELDS, StoredResponse, missing_response_fields

logger = get_logger(__name__)


def validate_response(payload: Dict[str, Any]) -> List[str]:
    """Return the required fields missing from ``payload`` (empty list when valid)."""
    return missing_response_fields(payload)


def save_response(store: Store, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Persist one response and return the stored record.

    Only the Response fields are kept. Identical payloads are stored as
    separate records; there is no de-duplication.

    Raises:
        pydantic.ValidationError: a field has a type that cannot be stored.
        StorageError: the backing store failed.
    """
    record = StoredResponse(**{name: payload.get(name) for name in REQUIRED_RESPONSE_FIELDS})
    saved = store.responses.insert(record)
    logger.info(
        "response_saved",
        response_id=saved["id"],
        category=saved["category"],
        location=saved["location"],
    )
    return saved


def list_responses(store: Store) -> List[Dict[str, Any]]:
    return store.responses.all()

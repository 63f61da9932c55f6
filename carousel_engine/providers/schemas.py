"""Pydantic schemas for catalog wire responses.

Listing responses are validated loosely: unknown fields are ignored and any
response that does not look like a page degrades to an empty page instead
of raising.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from carousel_engine.core.items import normalize_item
from carousel_engine.core.logging import get_logger
from carousel_engine.ports.catalog import PageResponse

logger = get_logger(__name__)


class PageEnvelope(BaseModel):
    """Spring-style page as returned by the listing endpoints."""

    content: list[dict[str, Any]] | None = None
    total_pages: int | None = Field(None, alias="totalPages", ge=0)
    total_elements: int | None = Field(None, alias="totalElements", ge=0)

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "content": [{"id": 1, "title": "Dune", "price": 120000}],
                "totalPages": 3,
                "totalElements": 18,
            }
        },
    )


def unwrap_envelope(payload: Any) -> Any:
    """Strip the ``{"data": ...}`` wrapper some endpoints add."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def parse_page(payload: Any) -> PageResponse:
    """Turn a raw listing payload into a PageResponse.

    A payload that is not a page, or has no ``content`` list, becomes an
    empty page whose ``total_pages`` is None so callers keep their previous
    page count.
    """
    payload = unwrap_envelope(payload)
    try:
        envelope = PageEnvelope.model_validate(payload)
    except ValidationError as ex:
        logger.warning("malformed_page_response", errors=ex.error_count())
        return PageResponse()

    if envelope.content is None:
        logger.warning("page_response_missing_content")
        return PageResponse()

    return PageResponse(
        content=[normalize_item(raw) for raw in envelope.content],
        total_pages=envelope.total_pages,
        total_elements=envelope.total_elements,
    )

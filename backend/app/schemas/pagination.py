"""Paginated list envelope for the template and exercise catalog endpoints."""

from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """One page of items plus the total matching count."""

    items: list
    total: int
    limit: int
    offset: int
    has_more: bool

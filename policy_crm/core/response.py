"""Standardized JSON response envelope helpers."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from policy_crm.core.pagination import PageMeta

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-item response envelope: `{ success, message, data }`"""

    success: bool = True
    message: str | None = None
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Paginated list response envelope: `{ success, message, data: [...], pagination: {...} }`"""

    success: bool = True
    message: str | None = None
    data: list[T]
    pagination: PageMeta


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def ok(data, message: str | None = None) -> dict:
    return {"success": True, "message": message, "data": data}


def paginated(items: list, total: int, page: int, limit: int, message: str | None = None) -> dict:
    """Build a paginated response dict for use with ListResponse."""
    return {
        "success": True,
        "message": message,
        "data": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 1,
        },
    }

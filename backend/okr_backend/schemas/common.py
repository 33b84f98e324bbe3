"""
Response envelopes shared by all endpoints.
"""

from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single payload wrapped as {"data": ...}."""
    data: T


class PageInfo(BaseModel):
    """Paging metadata echoed back to the client."""
    limit: int
    offset: int
    returned: int


class PageResponse(BaseModel, Generic[T]):
    """List payload with paging metadata."""
    data: List[T]
    page: PageInfo


class MessageResponse(BaseModel):
    message: str


class SuccessResponse(BaseModel):
    success: bool = True

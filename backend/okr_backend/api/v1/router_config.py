"""
Router configuration utilities for consistent authentication enforcement.
"""

from fastapi import APIRouter, Depends
from okr_backend.api.v1.middleware import get_current_identity


def create_protected_router(*args, **kwargs) -> APIRouter:
    """
    Create a router with authentication required for all routes.

    Usage:
        router = create_protected_router(tags=["goals"])
        # All routes on this router will require a valid bearer token

    Args:
        *args: Arguments to pass to APIRouter
        **kwargs: Keyword arguments to pass to APIRouter

    Returns:
        APIRouter with authentication dependency applied
    """
    dependencies = list(kwargs.pop("dependencies", []))
    return APIRouter(*args, dependencies=[Depends(get_current_identity), *dependencies], **kwargs)


def create_public_router(*args, **kwargs) -> APIRouter:
    """
    Create a router without authentication requirement.
    Use for public endpoints like health checks.

    Returns:
        APIRouter without authentication dependency
    """
    return APIRouter(*args, **kwargs)

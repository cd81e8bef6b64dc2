"""
Shared lookups for the API routers
"""
from fastapi import HTTPException, Request, status

from storefront.core.auth import TokenUser, ensure_store_owner
from storefront.domain.store import Store
from storefront.repositories.store_repository import StoreRepository

STORE_NOT_FOUND = "Store not found"
INTERNAL_ERROR = "Internal server error"


def get_store_or_404(slug: str) -> Store:
    store = StoreRepository().find_by_slug(slug)
    if store is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STORE_NOT_FOUND)
    return store


def get_owned_store(slug: str, user: TokenUser, detail: str = "Unauthorized") -> Store:
    """Store by slug; 404 when unknown, 403 when the caller does not own it"""
    store = get_store_or_404(slug)
    ensure_store_owner(store.user_id, user, detail)
    return store


def get_owned_store_by_id(store_id: str, user: TokenUser, detail: str = "Access denied") -> Store:
    """Store a product or order belongs to; 404 when gone, 403 for anyone but the owner"""
    store = StoreRepository().find_by_id(store_id)
    if store is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STORE_NOT_FOUND)
    ensure_store_owner(store.user_id, user, detail)
    return store


def client_ip(request: Request, fallback_header: str = None) -> str:
    """First X-Forwarded-For entry, optionally another header, else "unknown" """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if fallback_header and request.headers.get(fallback_header):
        return request.headers[fallback_header]
    return "unknown"

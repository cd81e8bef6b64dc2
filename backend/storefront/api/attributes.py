"""
Store Attributes API Endpoints
Color and size catalogs used for product variants
"""
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import INTERNAL_ERROR, get_owned_store, get_store_or_404
from storefront.core.auth import TokenUser, get_current_user
from storefront.domain.base import to_json_value
from storefront.domain.store import StoreAttributeCreate
from storefront.repositories.attribute_repository import AttributeRepository

logger = logging.getLogger(__name__)

router = APIRouter()

ATTRIBUTE_TYPES = ("color", "size")
HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)


def validate_attribute(payload: StoreAttributeCreate) -> tuple:
    """
    Returns:
        (name, value, hex_code) ready to store

    Raises:
        HTTPException 400: missing name, bad hex code or missing size value
    """
    if not payload.name or not payload.name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    name = payload.name.strip()

    if payload.type == "color":
        if not payload.hex_code or not HEX_COLOR.match(payload.hex_code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid hex code")
        return name, name, payload.hex_code

    if not payload.value or not payload.value.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Size value is required")
    return name, payload.value.strip(), None


@router.get("/stores/{slug}/attributes-config")
async def get_attributes(slug: str, user: TokenUser = Depends(get_current_user)):
    """Store specific and global colors and sizes"""
    try:
        store = get_store_or_404(slug)
        repo = AttributeRepository()
        return {
            "colors": to_json_value(repo.find_for_store(store.id, "color")),
            "sizes": to_json_value(repo.find_for_store(store.id, "size")),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list attributes of {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post("/stores/{slug}/attributes-config")
async def save_attribute(
    slug: str,
    payload: StoreAttributeCreate,
    user: TokenUser = Depends(get_current_user)
):
    """
    Create an attribute, or edit / delete one with action="edit" / "delete"
    """
    try:
        store = get_owned_store(slug, user)
        repo = AttributeRepository()

        if payload.action == "delete" and payload.id:
            if not repo.delete(store.id, payload.id):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attribute not found")
            return {"success": True}

        if payload.action == "edit" and payload.id:
            current = repo.find_by_id(store.id, payload.id)
            if current is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attribute not found")

            # The stored type decides which fields are required
            payload = payload.model_copy(update={"type": current["attribute_type"]})
            name, value, hex_code = validate_attribute(payload)
            updated = repo.update(store.id, payload.id, name, value, hex_code)
            if updated is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attribute not found")
            return to_json_value(updated)

        if payload.type not in ATTRIBUTE_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid attribute type")

        name, value, hex_code = validate_attribute(payload)

        if repo.exists(store.id, payload.type, name):
            label = "Color" if payload.type == "color" else "Size"
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} already exists")

        created = repo.create(store.id, payload.type, name, value, hex_code)
        logger.info(f"Attribute {payload.type} '{name}' added to {slug}")
        return to_json_value(created)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to save attribute in {slug}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)

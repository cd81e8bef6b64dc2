"""
Store Domain Model

A merchant's storefront: slug, branding, contact channels and settings.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime

from storefront.domain.base import RecordModel


DEFAULT_COLORS = {
    "primary": "#8B5CF6",
    "secondary": "#7C3AED",
    "accent": "#A855F7",
}

# Keys of the address object, in geocoding order
ADDRESS_PARTS = ("street", "number", "neighborhood", "city", "state", "zip_code")


class Store(RecordModel):
    """
    Store record

    Fields:
        id: Store UUID
        name: Display name
        slug: Unique URL identifier (/{slug})
        user_id: Owner (Supabase Auth user id)
        logo: Logo image URL
        description: Short bio shown on the page
        colors: Branding palette
        social_networks: whatsapp, instagram, tiktok, ... (whatsapp receives orders)
        category_id: Store directory category
        address: Street address (dict with street, number, neighborhood, city, state, zip_code)
        latitude / longitude: Store location for delivery distance
        layout_settings: Banner, grid and cart presentation options
        print_settings: Receipt printer configuration
    """

    id: str
    name: str
    slug: str
    user_id: Optional[str] = None
    logo: Optional[str] = ""
    description: Optional[str] = ""
    colors: Optional[Dict[str, Any]] = None
    social_networks: Optional[Dict[str, Any]] = None
    category_id: Optional[Any] = None
    address: Optional[Any] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    layout_settings: Optional[Dict[str, Any]] = None
    print_settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return bool(self.latitude) and bool(self.longitude)

    @property
    def address_line(self) -> str:
        """Address as a single geocodable line; empty when not configured"""
        if not self.address:
            return ""
        if isinstance(self.address, str):
            return self.address.strip()
        parts = [self.address.get(key) for key in ADDRESS_PARTS]
        return ", ".join(str(part).strip() for part in parts if part)

    @property
    def whatsapp(self) -> Optional[str]:
        return (self.social_networks or {}).get("whatsapp")


class StoreCreate(BaseModel):
    """Schema for creating a store"""
    store_name: Optional[str] = None
    slug: Optional[str] = None
    logo: Optional[str] = None
    colors: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class StoreUpdate(BaseModel):
    """Schema for updating store profile data"""
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    colors: Optional[Dict[str, Any]] = None
    social_networks: Optional[Dict[str, Any]] = None
    category_id: Optional[Any] = None


class StoreCategory(RecordModel):
    """Directory category a store is listed under (restaurants, fashion, ...)"""
    id: Any
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class StoreLayout(RecordModel):
    id: Any
    name: str
    is_active: bool = True


class StoreAttributeCreate(BaseModel):
    """
    Create, edit or delete a color/size attribute.

    action "edit" / "delete" with an id targets an existing store attribute.
    """
    action: Optional[str] = None
    id: Optional[Any] = None
    type: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None
    hex_code: Optional[str] = None


class PrintSettings(BaseModel):
    """Receipt printer configuration stored on the store row"""
    default_printer: str = ""
    auto_print: bool = False
    print_format: str = Field("thermal", pattern="^(thermal|a4)$")
    paper_width: int = 80
    auto_cut: bool = True
    print_logo: bool = True
    print_address: bool = True


class PrintSettingsUpdate(BaseModel):
    print_settings: Optional[Dict[str, Any]] = None

"""Variant endpoints: add a variant, upload variant photos, own it, want it.

Hey future me - a variant is one concrete garment of a design (black Gildan unisex tee vs.
white women's tank). "I own this" and "I want this" both hang off the variant, which is why
they live here and not under /collection or /wantlist.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_catalog_service,
    get_collection_service,
    get_current_identity,
    get_wantlist_service,
    read_photo_upload,
)
from merch_archive.api.schemas.catalog import (
    OwnershipRequest,
    OwnershipResponse,
    PhotoResponse,
    VariantResponse,
    WantlistItemResponse,
    ownership_to_response,
    photo_to_response,
    variant_to_response,
    wantlist_item_to_response,
)
from merch_archive.application.services import (
    CatalogService,
    CollectionService,
    WantlistService,
)
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/variants", tags=["Variants"])


# Yo, these defaults are what the add-variant form comes pre-filled with. Most band tees are
# black Gildan unisex t-shirts, so most submissions only change one field.
class CreateVariantRequest(BaseModel):
    """Request body for adding a variant."""

    design_id: str | None = Field(None, description="Owning design UUID")
    garment_type: str = Field("t-shirt", description="t-shirt, hoodie, longsleeve ...")
    base_color: str = Field("black", description="Base garment color")
    cut: str = Field("unisex", description="unisex, women's ...")
    manufacturer: str = Field("Gildan", description="Blank manufacturer")
    print_method: str | None = Field(None, description="Screen print, DTG ...")
    notes: str | None = Field(None, description="Free text")


@router.post("", response_model=VariantResponse, status_code=201)
async def create_variant(
    body: CreateVariantRequest,
    identity: Identity | None = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service),
) -> VariantResponse:
    """Add a variant to a design."""
    variant = await service.create_variant(
        identity,
        body.design_id,
        body.garment_type,
        body.base_color,
        body.cut,
        body.manufacturer,
        print_method=body.print_method,
        notes=body.notes,
    )
    return variant_to_response(variant)


@router.post("/{variant_id}/photos", response_model=PhotoResponse, status_code=201)
async def upload_variant_photo(
    variant_id: str,
    photo: UploadFile | None = File(None, description="Image file"),
    label: str | None = Form(None, description="Optional caption, e.g. back print"),
    identity: Identity | None = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_app_settings),
) -> PhotoResponse:
    """Upload a community photo of a variant."""
    upload = await read_photo_upload(photo, settings)
    row = await service.add_variant_photo(identity, variant_id, upload, label)
    return photo_to_response(row)


@router.post("/{variant_id}/own", response_model=OwnershipResponse, status_code=201)
async def mark_owned(
    variant_id: str,
    body: OwnershipRequest,
    identity: Identity | None = Depends(get_current_identity),
    service: CollectionService = Depends(get_collection_service),
) -> OwnershipResponse:
    """Add the variant to the caller's collection."""
    ownership = await service.mark_owned(
        identity, variant_id, body.size, body.memory, body.setlist_url
    )
    return ownership_to_response(ownership)


@router.post("/{variant_id}/want", response_model=WantlistItemResponse, status_code=201)
async def mark_wanted(
    variant_id: str,
    identity: Identity | None = Depends(get_current_identity),
    service: WantlistService = Depends(get_wantlist_service),
) -> WantlistItemResponse:
    """Put the variant on the caller's wantlist."""
    item = await service.mark_wanted(identity, variant_id)
    return wantlist_item_to_response(item)

"""Design endpoints: add a design under an artist, show a design with its variants."""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_catalog_service,
    get_current_identity,
    get_viewer_is_admin,
    read_photo_upload,
)
from merch_archive.api.schemas.catalog import (
    DesignResponse,
    PhotoResponse,
    VariantResponse,
    design_to_response,
    photo_to_response,
    variant_to_response,
)
from merch_archive.application.services import CatalogService
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/designs", tags=["Designs"])


class VariantListingResponse(BaseModel):
    """A variant as listed on its design page."""

    variant: VariantResponse
    owned_count: int = Field(0, description="How many collectors own it")
    photos: list[PhotoResponse] = Field(default_factory=list)


class DesignPageResponse(BaseModel):
    """A design with variants and the filter dropdown choices."""

    design: DesignResponse
    variants: list[VariantListingResponse]
    total_variants: int = Field(..., description="Variants before filtering")
    colors: list[str] = Field(default_factory=list)
    garment_types: list[str] = Field(default_factory=list)
    manufacturers: list[str] = Field(default_factory=list)


@router.post("", response_model=DesignResponse, status_code=201)
async def create_design(
    artist_id: str | None = Form(None, description="Owning artist UUID"),
    title: str | None = Form(None, description="Design title"),
    circa: str | None = Form(None, description="Approximate year, e.g. 1998"),
    photo: UploadFile | None = File(None, description="Optional design photo"),
    identity: Identity | None = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_app_settings),
) -> DesignResponse:
    """Add a design to an artist."""
    upload = await read_photo_upload(photo, settings)
    design = await service.create_design(identity, artist_id, title, circa, upload)
    return design_to_response(design)


@router.get("/{design_id}", response_model=DesignPageResponse)
async def get_design(
    design_id: str,
    color: str | None = Query(None, description="Exact base color"),
    garment_type: str | None = Query(None, description="Exact garment type"),
    manufacturer: str | None = Query(None, description="Exact manufacturer"),
    viewer_is_admin: bool = Depends(get_viewer_is_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> DesignPageResponse:
    """Design page with variants, owned counts and photos."""
    page = await service.get_design_page(
        design_id,
        color=color,
        garment_type=garment_type,
        manufacturer=manufacturer,
        viewer_is_admin=viewer_is_admin,
    )
    return DesignPageResponse(
        design=design_to_response(page.design),
        variants=[
            VariantListingResponse(
                variant=variant_to_response(listing.variant),
                owned_count=listing.owned_count,
                photos=[photo_to_response(p) for p in listing.photos],
            )
            for listing in page.variants
        ],
        total_variants=page.total_variants,
        colors=page.colors,
        garment_types=page.garment_types,
        manufacturers=page.manufacturers,
    )

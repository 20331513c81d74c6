"""Application services."""

from merch_archive.application.services.admin_service import AdminService
from merch_archive.application.services.artist_service import ArtistService, SlugPreview
from merch_archive.application.services.auth_service import AuthService
from merch_archive.application.services.catalog_service import CatalogService
from merch_archive.application.services.collection_service import CollectionService
from merch_archive.application.services.profile_service import ProfileService
from merch_archive.application.services.search_service import SearchService
from merch_archive.application.services.slug_service import SlugService
from merch_archive.application.services.stats_service import StatsService
from merch_archive.application.services.wantlist_service import WantlistService

__all__ = [
    "AdminService",
    "ArtistService",
    "AuthService",
    "CatalogService",
    "CollectionService",
    "ProfileService",
    "SearchService",
    "SlugPreview",
    "SlugService",
    "StatsService",
    "WantlistService",
]

"""Infrastructure persistence layer."""

from .database import Database
from .models import (
    ArtistModel,
    AuthSessionModel,
    Base,
    DesignModel,
    OwnershipModel,
    OwnershipPhotoModel,
    ProfileModel,
    UserModel,
    VariantModel,
    VariantPhotoModel,
    WantlistModel,
)
from .repositories import (
    AdminProcedures,
    ArtistRepository,
    AuthSessionRepository,
    DesignRepository,
    OwnershipRepository,
    PhotoRepository,
    ProfileRepository,
    SqlExistenceProbe,
    UserRepository,
    VariantRepository,
    WantlistRepository,
)

__all__ = [
    # Database
    "Database",
    "Base",
    # Models
    "ArtistModel",
    "AuthSessionModel",
    "DesignModel",
    "OwnershipModel",
    "OwnershipPhotoModel",
    "ProfileModel",
    "UserModel",
    "VariantModel",
    "VariantPhotoModel",
    "WantlistModel",
    # Repositories
    "AdminProcedures",
    "ArtistRepository",
    "AuthSessionRepository",
    "DesignRepository",
    "OwnershipRepository",
    "PhotoRepository",
    "ProfileRepository",
    "SqlExistenceProbe",
    "UserRepository",
    "VariantRepository",
    "WantlistRepository",
]

"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import CacheEntity, CacheOperation, OperationClass, WriteOperation
from app.domain.exceptions import (
    DuplicateResourceException,
    EShopException,
    RelatedResourceMissingException,
    ResourceInUseException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "CacheEntity",
    "CacheOperation",
    "OperationClass",
    "WriteOperation",
    "EShopException",
    "ValidationException",
    "ResourceNotFoundException",
    "DuplicateResourceException",
    "RelatedResourceMissingException",
    "ResourceInUseException",
]

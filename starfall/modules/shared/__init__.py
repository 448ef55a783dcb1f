"""
Shared service infrastructure for Starfall modules.

`base_repository` is not re-exported here: it depends on the adapter
interfaces, which depend on `constants`. Import it directly.
"""

from starfall.modules.shared.base_service import BaseService
from starfall.modules.shared.constants import (
    DataKey,
    DataPermission,
    HandlerName,
    StatisticKey,
    TitleDataKey,
)
from starfall.modules.shared.exceptions import (
    NotFoundError,
    StarfallDomainException,
    ValidationError,
)

__all__ = [
    "BaseService",
    "DataKey",
    "DataPermission",
    "HandlerName",
    "StatisticKey",
    "TitleDataKey",
    "NotFoundError",
    "StarfallDomainException",
    "ValidationError",
]

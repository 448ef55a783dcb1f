"""
Adapters to the external stores the engine depends on.

- **base**: abstract `ReferenceDataStore` / `PlayerRecordStore` interfaces
- **playfab**: PlayFab Server API implementation of both
"""

from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore

__all__ = ["PlayerRecordStore", "ReferenceDataStore"]

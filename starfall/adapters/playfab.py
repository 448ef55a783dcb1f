"""
PlayFab Server API adapter.

Purpose
-------
Implement `ReferenceDataStore` and `PlayerRecordStore` against the PlayFab
Server API over HTTPS, authenticated with the title secret key.

Responsibilities
----------------
- Map each store operation onto exactly one `POST {base}/Server/{Api}` call
- Unwrap the `{"code", "status", "data"}` envelope
- Translate transport failures, non-200 responses and error envelopes into
  `RecordStoreError`; malformed title data into `ReferenceDataError`
- Guard every call with a `CircuitBreaker`

Non-Responsibilities
--------------------
- Retrying (never; a retried grant could double-grant)
- Caching title data (see `starfall.core.cache.reference_cache`)

Design Notes
------------
`requests` is blocking, so each round-trip runs in the event loop's default
executor. One `requests.Session` is shared for connection pooling and is
closed by `close()`.
"""

from __future__ import annotations

import asyncio
import functools
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from starfall.adapters.base import PlayerRecordStore, ReferenceDataStore
from starfall.core.exceptions import RecordStoreError, ReferenceDataError
from starfall.core.logging.logger import get_logger
from starfall.core.resilience.circuit_breaker import CircuitBreaker
from starfall.domain.models.player import Inventory, ItemInstance
from starfall.modules.shared.constants import DataPermission

logger = get_logger(__name__)


class PlayFabClient(ReferenceDataStore, PlayerRecordStore):
    """
    PlayFab Server API client.

    Args:
        base_url: e.g. ``https://{title_id}.playfabapi.com``
        secret_key: Title secret key sent as ``X-SecretKey``
        timeout_seconds: Per-request timeout
        circuit_breaker: Optional breaker; one is created when omitted
        session: Optional pre-built session (tests inject a mock)
    """

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout_seconds: float = 10,
        circuit_breaker: Optional[CircuitBreaker] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.breaker = circuit_breaker or CircuitBreaker("playfab")

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "X-SecretKey": secret_key,
            }
        )

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _post_sync(self, api: str, body: Mapping[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/Server/{api}"

        try:
            response = self.session.post(url, json=dict(body), timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise RecordStoreError(api, str(exc), original_error=exc) from exc

        try:
            envelope = response.json()
        except ValueError as exc:
            raise RecordStoreError(
                api,
                f"response is not JSON (HTTP {response.status_code})",
                status_code=response.status_code,
                original_error=exc,
            ) from exc

        if response.status_code != 200:
            message = "request failed"
            if isinstance(envelope, dict):
                message = envelope.get("errorMessage") or envelope.get("error") or message
            raise RecordStoreError(api, message, status_code=response.status_code)

        if not isinstance(envelope, dict):
            raise RecordStoreError(api, "unexpected response envelope", status_code=200)

        return envelope.get("data") or {}

    async def _post(self, api: str, body: Mapping[str, Any]) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        call = functools.partial(self._post_sync, api, body)

        async def _run() -> Dict[str, Any]:
            return await loop.run_in_executor(None, call)

        logger.debug("PlayFab call", extra={"api": api})
        return await self.breaker.call(_run)

    async def close(self) -> None:
        self.session.close()

    # =========================================================================
    # REFERENCE DATA
    # =========================================================================

    async def get_title_data(self, keys: Sequence[str]) -> Dict[str, Any]:
        data = await self._post("GetTitleData", {"Keys": list(keys)})
        raw_values: Dict[str, str] = data.get("Data") or {}

        decoded: Dict[str, Any] = {}
        for key, raw in raw_values.items():
            try:
                decoded[key] = json.loads(raw)
            except (TypeError, ValueError) as exc:
                raise ReferenceDataError(key, f"title data is not valid JSON: {exc}") from exc
        return decoded

    async def evaluate_random_result_table(
        self, table_id: str, catalog_version: Optional[str] = None
    ) -> str:
        body: Dict[str, Any] = {"TableId": table_id}
        if catalog_version:
            body["CatalogVersion"] = catalog_version

        data = await self._post("EvaluateRandomResultTable", body)
        result = data.get("ResultItemId")
        if not result:
            raise ReferenceDataError(table_id, "random result table produced no item")
        return result

    # =========================================================================
    # STATISTICS
    # =========================================================================

    async def get_statistics(
        self, player_id: str, names: Sequence[str]
    ) -> Dict[str, int]:
        data = await self._post(
            "GetPlayerStatistics",
            {"PlayFabId": player_id, "StatisticNames": list(names)},
        )
        return {
            stat["StatisticName"]: int(stat["Value"])
            for stat in data.get("Statistics") or []
        }

    async def update_statistics(
        self, player_id: str, values: Mapping[str, int]
    ) -> None:
        await self._post(
            "UpdatePlayerStatistics",
            {
                "PlayFabId": player_id,
                "Statistics": [
                    {"StatisticName": name, "Value": int(value)}
                    for name, value in values.items()
                ],
            },
        )

    # =========================================================================
    # KEYED DATA
    # =========================================================================

    async def get_data(self, player_id: str, keys: Sequence[str]) -> Dict[str, str]:
        data = await self._post("GetUserData", {"PlayFabId": player_id, "Keys": list(keys)})
        return {
            key: record["Value"]
            for key, record in (data.get("Data") or {}).items()
            if record and record.get("Value") is not None
        }

    async def update_data(
        self,
        player_id: str,
        data: Mapping[str, str],
        permission: DataPermission = DataPermission.PRIVATE,
    ) -> int:
        result = await self._post(
            "UpdateUserData",
            {
                "PlayFabId": player_id,
                "Data": dict(data),
                "Permission": DataPermission(permission).value,
            },
        )
        return int(result.get("DataVersion", 0))

    # =========================================================================
    # INVENTORY
    # =========================================================================

    @staticmethod
    def _item_from_wire(raw: Mapping[str, Any]) -> ItemInstance:
        return ItemInstance(
            item_id=raw.get("ItemId", ""),
            item_instance_id=raw.get("ItemInstanceId", ""),
            item_class=raw.get("ItemClass"),
            remaining_uses=raw.get("RemainingUses"),
        )

    async def get_inventory(self, player_id: str) -> Inventory:
        data = await self._post("GetUserInventory", {"PlayFabId": player_id})
        return Inventory(
            items=tuple(self._item_from_wire(raw) for raw in data.get("Inventory") or []),
            currency=dict(data.get("VirtualCurrency") or {}),
        )

    async def grant_items(
        self,
        player_id: str,
        item_ids: Sequence[str],
        catalog_version: Optional[str] = None,
    ) -> List[ItemInstance]:
        body: Dict[str, Any] = {"PlayFabId": player_id, "ItemIds": list(item_ids)}
        if catalog_version:
            body["CatalogVersion"] = catalog_version

        data = await self._post("GrantItemsToUser", body)

        granted: List[ItemInstance] = []
        for raw in data.get("ItemGrantResults") or []:
            if raw.get("Result") is False:
                logger.warning(
                    "PlayFab refused item grant",
                    extra={"item_id": raw.get("ItemId")},
                )
                continue
            granted.append(self._item_from_wire(raw))
        return granted

    async def consume_item(
        self, player_id: str, item_instance_id: str, count: int
    ) -> None:
        await self._post(
            "ConsumeItem",
            {
                "PlayFabId": player_id,
                "ItemInstanceId": item_instance_id,
                "ConsumeCount": count,
            },
        )

    # =========================================================================
    # TELEMETRY
    # =========================================================================

    async def write_event(
        self, player_id: str, event_name: str, body: Mapping[str, Any]
    ) -> None:
        await self._post(
            "WritePlayerEvent",
            {"PlayFabId": player_id, "EventName": event_name, "Body": dict(body)},
        )

"""
Unit Tests for CombatService
============================

Test Coverage
-------------
- Kill / experience awards computed from reference data
- Rejected submissions touch no player state
- Client HP handling (verbatim, clamped, ignored on level-up)
- Level-up vitals and item grants
- Loot rolls and bundle unpacking
- Remote call ordering and failure propagation
- Telemetry isolation
"""

import pytest

from starfall.core.exceptions import RecordStoreError, ReferenceDataError
from starfall.modules.progression.contracts import CombatRequest
from starfall.modules.progression.service import CombatService
from tests.conftest import FakeReferenceStore, FixedRoll, title_documents


def _request(planet="Kepler", area="Crater", group="Rat Pack", hp=80):
    return CombatRequest(planet=planet, area=area, enemy_group=group, player_hp=hp)


def _service(config_manager, reference_store, record_store, inventory_service, logger, roll):
    return CombatService(
        config_manager,
        reference_store,
        record_store,
        inventory_service,
        logger,
        rng=FixedRoll(roll),
    )


# ============================================================================
# REWARD TESTS
# ============================================================================


@pytest.mark.asyncio
class TestCombatRewards:
    """Test kills and experience awarded for a valid submission."""

    async def test_new_player_rewards(self, combat_service, record_store, player_id):
        """Three enemies worth 10 each: 3 kills, 30 experience."""
        # Act
        response = await combat_service.resolve_combat(player_id, _request())

        # Assert
        assert response.to_dict() == {
            "isError": False,
            "kills": 3,
            "experience": 30,
            "itemsGranted": ["RatTail"],
        }
        assert record_store.calls_to("update_statistics") == [
            {"kills": 3, "experience": 30}
        ]

    async def test_rewards_accumulate(self, combat_service, record_store, player_id):
        """Existing statistics are incremented, not replaced."""
        # Arrange
        record_store.statistics[player_id] = {"kills": 7, "experience": 40, "level": 1}

        # Act
        response = await combat_service.resolve_combat(player_id, _request(group="Lone Wolf"))

        # Assert
        assert response.kills == 8
        assert response.experience == 50
        assert record_store.statistics[player_id] == {"kills": 8, "experience": 50, "level": 1}

    async def test_level_omitted_without_level_up(self, combat_service, record_store, player_id):
        """Level is neither written nor returned when unchanged."""
        response = await combat_service.resolve_combat(player_id, _request())

        assert "level" not in record_store.calls_to("update_statistics")[0]
        assert "level" not in response.to_dict()
        assert "hitPoints" not in response.to_dict()


# ============================================================================
# VALIDATION TESTS
# ============================================================================


@pytest.mark.asyncio
class TestCombatValidation:
    """Test rejected submissions."""

    async def test_rejected_submission_touches_no_player_state(
        self, combat_service, record_store, player_id
    ):
        """An invalid request reads and writes nothing on the player record."""
        response = await combat_service.resolve_combat(player_id, _request(planet="Pluto"))

        assert response.to_dict() == {"isError": True, "errorMessage": "Planet Pluto not found."}
        assert record_store.calls == []

    async def test_undefined_group_rejected(self, combat_service, record_store, player_id):
        response = await combat_service.resolve_combat(
            player_id, _request(area="Ridge", group="Ghosts")
        )

        assert response.is_error
        assert response.error_message == "Enemy group Ghosts not found."
        assert record_store.writes == []

    async def test_group_with_undefined_enemy_raises(
        self, combat_service, record_store, player_id
    ):
        """Broken content is an infrastructure error, not a client error."""
        with pytest.raises(ReferenceDataError):
            await combat_service.resolve_combat(player_id, _request(group="Broken Pack"))

        assert record_store.calls == []

    async def test_missing_title_data_raises(
        self, config_manager, record_store, inventory_service, test_logger, player_id
    ):
        documents = title_documents()
        del documents["Levels"]
        service = _service(
            config_manager,
            FakeReferenceStore(documents),
            record_store,
            inventory_service,
            test_logger,
            0.0,
        )

        with pytest.raises(ReferenceDataError):
            await service.resolve_combat(player_id, _request())

    async def test_fractional_experience_content_raises(
        self, config_manager, record_store, inventory_service, test_logger, player_id
    ):
        """Half-point enemies are refused before any statistic is read or written."""
        # Arrange
        documents = title_documents()
        documents["Enemies"]["enemies"].append({"name": "mite", "experience": 2.5})
        documents["Enemies"]["enemyGroups"].append({"name": "Mites", "enemies": ["mite"]})
        documents["Planets"]["planets"][0]["areas"][0]["enemyGroups"].append("Mites")
        service = _service(
            config_manager,
            FakeReferenceStore(documents),
            record_store,
            inventory_service,
            test_logger,
            0.0,
        )

        # Act
        with pytest.raises(ReferenceDataError) as exc_info:
            await service.resolve_combat(player_id, _request(group="Mites"))

        # Assert
        assert exc_info.value.details["key"] == "enemy.experience"
        assert record_store.calls == []


# ============================================================================
# VITALS TESTS
# ============================================================================


@pytest.mark.asyncio
class TestCombatVitals:
    """Test how client-reported HP is persisted."""

    async def test_client_hp_stored_verbatim(self, combat_service, record_store, player_id):
        """In-range HP is written as reported, current HP only."""
        await combat_service.resolve_combat(player_id, _request(hp=73))

        data, _ = record_store.calls_to("update_data")[0]
        assert data == {"currenthp": "73"}

    async def test_client_hp_clamped_to_max(self, combat_service, record_store, player_id):
        """Claimed HP above max is clamped."""
        record_store.data[player_id] = {"currenthp": "40", "maxhp": "100"}

        await combat_service.resolve_combat(player_id, _request(hp=9999))

        assert record_store.data[player_id]["currenthp"] == "100"

    async def test_negative_client_hp_clamped_to_zero(self, combat_service, record_store, player_id):
        await combat_service.resolve_combat(player_id, _request(hp=-5))

        assert record_store.data[player_id]["currenthp"] == "0"

    async def test_level_up_heals_to_new_max(self, combat_service, record_store, player_id):
        """Level-up raises max HP and ignores the client's HP."""
        # Arrange
        record_store.statistics[player_id] = {"kills": 0, "experience": 90, "level": 1}
        record_store.data[player_id] = {"currenthp": "35", "maxhp": "100"}

        # Act
        response = await combat_service.resolve_combat(player_id, _request(hp=10))

        # Assert
        assert record_store.data[player_id] == {"currenthp": "120", "maxhp": "120"}
        assert response.level == 2
        assert response.hit_points == 120


# ============================================================================
# LEVEL-UP AND ITEM TESTS
# ============================================================================


@pytest.mark.asyncio
class TestCombatItems:
    """Test level items, loot and bundle unpacking."""

    async def test_level_items_and_loot_granted_together(
        self, combat_service, record_store, player_id
    ):
        """Level reward items precede loot in a single grant call."""
        record_store.statistics[player_id] = {"kills": 0, "experience": 90, "level": 1}

        response = await combat_service.resolve_combat(player_id, _request())

        assert record_store.calls_to("grant_items") == [["BronzeMedal", "RatTail"]]
        assert response.to_dict() == {
            "isError": False,
            "kills": 3,
            "experience": 120,
            "itemsGranted": ["BronzeMedal", "RatTail"],
            "level": 2,
            "hitPoints": 120,
        }
        assert record_store.statistics[player_id]["level"] == 2

    async def test_failed_drop_roll_grants_nothing(
        self, config_manager, reference_store, record_store, inventory_service, test_logger, player_id
    ):
        """A roll above the drop chance skips the loot table entirely."""
        service = _service(
            config_manager, reference_store, record_store, inventory_service, test_logger, 0.9
        )

        response = await service.resolve_combat(player_id, _request())

        assert response.items_granted == ()
        assert record_store.calls_to("grant_items") == []
        assert ("evaluate_random_result_table", "RatLoot") not in reference_store.calls

    async def test_group_without_drop_chance_always_drops(
        self, config_manager, record_store, inventory_service, test_logger, player_id
    ):
        """Alpha has a drop table and no chance; it drops even on a high roll."""
        reference_store = FakeReferenceStore(loot=("AlphaFang",))
        service = _service(
            config_manager, reference_store, record_store, inventory_service, test_logger, 0.99
        )

        response = await service.resolve_combat(player_id, _request(area="Ridge", group="Alpha"))

        assert response.items_granted == ("BronzeMedal", "AlphaFang")
        assert response.level == 3
        assert response.hit_points == 150

    async def test_group_without_drop_table_grants_nothing(
        self, combat_service, reference_store, record_store, player_id
    ):
        await combat_service.resolve_combat(player_id, _request(group="Lone Wolf"))

        assert record_store.calls_to("grant_items") == []
        assert all(name != "evaluate_random_result_table" for name, _ in reference_store.calls)

    async def test_bundle_loot_is_unpacked(self, combat_service, record_store, player_id):
        """Loot whose class contains the unpack marker is consumed with all uses."""
        record_store.catalog["RatTail"] = ("loot-unpack", 5)

        await combat_service.resolve_combat(player_id, _request())

        assert record_store.calls_to("consume_item") == [("inst-1", 5)]


# ============================================================================
# ORDERING AND FAILURE TESTS
# ============================================================================


@pytest.mark.asyncio
class TestCombatOrdering:
    """Test remote call order, failure propagation and telemetry."""

    async def test_remote_calls_run_in_order(self, combat_service, record_store, player_id):
        await combat_service.resolve_combat(player_id, _request())

        assert [name for name, _ in record_store.calls] == [
            "get_statistics",
            "get_data",
            "update_statistics",
            "update_data",
            "grant_items",
            "write_event",
        ]

    async def test_write_failure_keeps_earlier_writes(
        self, combat_service, record_store, player_id
    ):
        """No rollback: statistics stay committed when the vitals write fails."""
        record_store.fail_on.add("update_data")

        with pytest.raises(RecordStoreError):
            await combat_service.resolve_combat(player_id, _request())

        assert record_store.statistics[player_id] == {"kills": 3, "experience": 30}
        assert record_store.calls_to("grant_items") == []

    async def test_telemetry_failure_is_swallowed(self, combat_service, record_store, player_id):
        record_store.fail_on.add("write_event")

        response = await combat_service.resolve_combat(player_id, _request())

        assert not response.is_error
        assert response.kills == 3

    async def test_telemetry_body(self, combat_service, record_store, player_id):
        await combat_service.resolve_combat(player_id, _request())

        assert record_store.events == [
            (
                player_id,
                "killed_enemy_group",
                {"planet": "Kepler", "area": "Crater", "enemyGroup": "Rat Pack"},
            )
        ]

"""
Unit Tests for Player Domain Models
===================================

Test Coverage
-------------
- Vitals invariants, clamping and healing
- Equipment merge semantics
- Inventory first-login helpers
"""

import pytest

from starfall.domain.models.base import DomainValidationError
from starfall.domain.models.player import (
    Inventory,
    ItemInstance,
    PlayerStatistics,
    PlayerVitals,
    apply_equipment,
)


# ============================================================================
# VITALS TESTS
# ============================================================================


class TestPlayerVitals:
    """Test hit point invariants."""

    def test_current_above_max_rejected(self):
        """Current HP may never exceed max HP."""
        with pytest.raises(DomainValidationError):
            PlayerVitals(current_hp=120, max_hp=100)

    def test_negative_current_rejected(self):
        with pytest.raises(DomainValidationError):
            PlayerVitals(current_hp=-1, max_hp=100)

    def test_clamped_caps_at_max(self):
        """Values above max are clamped to max."""
        assert PlayerVitals.clamped(500, 100).current_hp == 100

    def test_clamped_floors_at_zero(self):
        assert PlayerVitals.clamped(-30, 100).current_hp == 0

    def test_clamped_keeps_in_range_value_verbatim(self):
        """In-range values pass through unchanged."""
        vitals = PlayerVitals.clamped(73, 100)

        assert vitals.current_hp == 73
        assert vitals.max_hp == 100

    def test_bonus_max_hp_heals_to_new_max(self):
        """A max HP bonus raises max and sets current to it."""
        vitals = PlayerVitals(current_hp=10, max_hp=100).with_bonus_max_hp(50)

        assert vitals == PlayerVitals(current_hp=150, max_hp=150)

    def test_bonus_max_hp_cannot_be_negative(self):
        """Max HP never decreases."""
        with pytest.raises(DomainValidationError):
            PlayerVitals(current_hp=10, max_hp=100).with_bonus_max_hp(-5)

    def test_is_full_and_restored(self):
        vitals = PlayerVitals(current_hp=40, max_hp=100)

        assert not vitals.is_full
        assert vitals.restored().is_full


class TestPlayerStatistics:

    def test_level_must_be_positive(self):
        with pytest.raises(DomainValidationError):
            PlayerStatistics(kills=0, experience=0, level=0)


# ============================================================================
# EQUIPMENT TESTS
# ============================================================================


class TestApplyEquipment:
    """Test last-write-wins equipment merging."""

    def test_other_slots_untouched(self):
        """Adding feet keeps the existing head item."""
        merged = apply_equipment({"head": "helm-1"}, [("feet", "boots-1")])

        assert merged == {"head": "helm-1", "feet": "boots-1"}

    def test_later_assignment_wins(self):
        merged = apply_equipment({}, [("head", "a"), ("head", "b")])

        assert merged == {"head": "b"}

    def test_absent_equipment_created(self):
        assert apply_equipment(None, [("hand", "sword")]) == {"hand": "sword"}

    def test_input_not_mutated(self):
        current = {"head": "helm-1"}

        apply_equipment(current, [("head", "helm-2")])

        assert current == {"head": "helm-1"}


# ============================================================================
# INVENTORY TESTS
# ============================================================================


class TestInventory:

    def test_absent_currency_counts_as_zero(self):
        assert Inventory().currency_balance("CR") == 0

    def test_currency_balance(self):
        assert Inventory(currency={"CR": 250}).currency_balance("CR") == 250

    def test_item_class_match(self):
        """Unpack detection is a substring match on the item class."""
        bundle = ItemInstance("CreditPack", "i1", item_class="credits-unpack")
        plain = ItemInstance("Sword", "i2", item_class="weapon")
        classless = ItemInstance("Thing", "i3")

        assert bundle.has_class_containing("unpack")
        assert not plain.has_class_containing("unpack")
        assert not classless.has_class_containing("unpack")

"""Unit tests for killedEnemyGroup request/response contracts."""

import pytest

from starfall.modules.progression.contracts import CombatRequest, CombatResponse
from starfall.modules.shared.exceptions import ValidationError


class TestCombatRequest:

    def test_from_payload(self):
        request = CombatRequest.from_payload(
            {"planet": "Kepler", "area": "Crater", "enemyGroup": "Rat Pack", "playerHP": 42.5}
        )

        assert request == CombatRequest("Kepler", "Crater", "Rat Pack", 42.5)

    @pytest.mark.parametrize(
        "payload",
        [
            {"area": "Crater", "enemyGroup": "Rat Pack", "playerHP": 1},
            {"planet": "", "area": "Crater", "enemyGroup": "Rat Pack", "playerHP": 1},
            {"planet": "Kepler", "area": "Crater", "enemyGroup": "Rat Pack", "playerHP": "1"},
            {"planet": "Kepler", "area": 3, "enemyGroup": "Rat Pack", "playerHP": 1},
        ],
    )
    def test_malformed_payload_rejected(self, payload):
        with pytest.raises(ValidationError):
            CombatRequest.from_payload(payload)


class TestCombatResponse:

    def test_error_shape(self):
        assert CombatResponse.error("Planet X not found.").to_dict() == {
            "isError": True,
            "errorMessage": "Planet X not found.",
        }

    def test_level_fields_only_on_level_up(self):
        response = CombatResponse(kills=1, experience=5, items_granted=("A",), level=2, hit_points=120)

        assert response.to_dict() == {
            "isError": False,
            "kills": 1,
            "experience": 5,
            "itemsGranted": ["A"],
            "level": 2,
            "hitPoints": 120,
        }

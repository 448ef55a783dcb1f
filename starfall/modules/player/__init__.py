from starfall.modules.player.contracts import LoginResponse, ReturnToBaseResponse
from starfall.modules.player.service import PlayerSessionService

__all__ = ["LoginResponse", "PlayerSessionService", "ReturnToBaseResponse"]

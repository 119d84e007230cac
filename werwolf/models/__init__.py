"""Re-exports all models to ensure Alembic detects them."""
from .game import Game, GamePhase, WinState
from .player import Player, PlayerRole
from .round_state import RoundState, InspectResult
from .vote import Vote, VotePhase
from .leave_request import LeaveRequest, LeaveRequestStatus

__all__ = [
    "Game",
    "GamePhase",
    "WinState",
    "Player",
    "PlayerRole",
    "RoundState",
    "InspectResult",
    "Vote",
    "VotePhase",
    "LeaveRequest",
    "LeaveRequestStatus",
]

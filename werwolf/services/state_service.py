"""State serialization service — the per-viewer game snapshot.

This module is the only place that turns game rows into response dicts.
Secret information is filtered here:

- the host sees every role and every night action
- a player sees their own role; werewolves also see each other
- each night action is visible to the role that made it
- the night's death becomes public once the host has revealed it
"""
from datetime import datetime
from typing import Any
from ..extensions import db
from ..models.game import Game
from ..models.player import Player, PlayerRole
from ..models.round_state import RoundState
from ..models.vote import Vote
from ..models.leave_request import LeaveRequest


def build_game_state_payload(game: Game, viewer: Player | None) -> dict[str, Any]:
    """Build the full snapshot of a game as seen by one viewer.

    Args:
        game: The Game ORM instance (must be inside an active db session).
        viewer: The player asking, or None for an outsider.

    Returns:
        Dict with ``game``, ``players``, ``round_state``, ``votes`` and
        ``leave_requests``.
    """
    votes = db.session.execute(
        db.select(Vote).where(Vote.game_id == game.id, Vote.round == game.day_count).order_by(Vote.id)
    ).scalars().all()
    leave_requests = db.session.execute(
        db.select(LeaveRequest).where(LeaveRequest.game_id == game.id).order_by(LeaveRequest.id)
    ).scalars().all()

    return {
        "game": game_dict(game, viewer),
        "players": [
            player_dict(p, show_role=_can_see_role(viewer, p))
            for p in sort_players(game.players, viewer)
        ],
        "round_state": _round_state_dict(game.round_state, viewer),
        "votes": [vote_dict(v) for v in votes],
        "leave_requests": [leave_request_dict(r) for r in leave_requests],
    }


def sort_players(players: list[Player], viewer: Player | None) -> list[Player]:
    """Order players with the viewer first, then by join order.

    Args:
        players: Players of one game.
        viewer: The player asking, or None.

    Returns:
        A new sorted list.
    """
    viewer_id = viewer.id if viewer is not None else None
    return sorted(players, key=lambda p: (p.id != viewer_id, p.id))


def game_dict(game: Game, viewer: Player | None = None) -> dict[str, Any]:
    """Serialise a Game instance to a dict.

    ``host_client_id`` is returned to the host only.

    Args:
        game: The Game instance.
        viewer: The player asking, or None for an outsider.
    """
    is_host = viewer is not None and viewer.is_host
    return {
        "id": game.id,
        "code": game.code,
        "phase": game.phase.value,
        "win_state": game.win_state.value if game.win_state else None,
        "day_count": game.day_count,
        "host_client_id": game.host_client_id if is_host else None,
        "created_at": _iso(game.created_at),
    }


def player_dict(player: Player, show_role: bool = True) -> dict[str, Any]:
    """Serialise a Player instance to a dict.

    Args:
        player: The Player instance.
        show_role: When False the role is reported as None.
    """
    return {
        "id": player.id,
        "game_id": player.game_id,
        "name": player.name,
        "role": player.role.value if (show_role and player.role) else None,
        "alive": player.alive,
        "is_host": player.is_host,
    }


def vote_dict(vote: Vote) -> dict[str, Any]:
    """Serialise a Vote instance to a dict."""
    return {
        "id": vote.id,
        "voter_player_id": vote.voter_player_id,
        "target_player_id": vote.target_player_id,
        "round": vote.round,
        "phase": vote.phase.value,
    }


def leave_request_dict(request: LeaveRequest) -> dict[str, Any]:
    """Serialise a LeaveRequest instance to a dict."""
    return {
        "id": request.id,
        "player_id": request.player_id,
        "player_name": request.player_name,
        "status": request.status.value,
        "requested_at": _iso(request.requested_at),
        "processed_at": _iso(request.processed_at),
        "processed_by": request.processed_by,
    }


def _can_see_role(viewer: Player | None, player: Player) -> bool:
    if viewer is None:
        return False
    if viewer.is_host or viewer.id == player.id:
        return True
    return viewer.is_werewolf and player.is_werewolf


def _round_state_dict(state: RoundState | None, viewer: Player | None) -> dict[str, Any] | None:
    if state is None:
        return None

    is_host = viewer is not None and viewer.is_host
    role = viewer.role if viewer is not None else None
    sees_wolf = is_host or role == PlayerRole.WEREWOLF
    sees_police = is_host or role == PlayerRole.POLICE
    sees_doctor = is_host or role == PlayerRole.DOCTOR

    return {
        "game_id": state.game_id,
        "phase_started": state.phase_started,
        "revealed": state.revealed,
        "wolf_target_player_id": state.wolf_target_player_id if sees_wolf else None,
        "police_inspect_player_id": state.police_inspect_player_id if sees_police else None,
        "police_inspect_result": (
            state.police_inspect_result.value
            if sees_police and state.police_inspect_result
            else None
        ),
        "doctor_save_player_id": state.doctor_save_player_id if sees_doctor else None,
        "resolved_death_player_id": (
            state.resolved_death_player_id if (state.revealed or is_host) else None
        ),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None

"""Roster service — removing players and the leave-request workflow."""
import logging
from datetime import datetime
from typing import Any
from flask import current_app
from ..extensions import db
from ..models.game import Game, GamePhase
from ..models.player import Player
from ..models.leave_request import LeaveRequest, LeaveRequestStatus
from ..models.vote import Vote
from ..errors import ForbiddenError, NotFoundError, ValidationError
from .guards import assert_host, find_player, non_host_count
from .phase_service import get_round_state
from .role_service import clear_roles
from .vote_service import delete_votes_involving
from .win_service import evaluate_win

logger = logging.getLogger(__name__)

REMOVAL_END = "end"
REMOVAL_RESET_LOBBY = "reset_lobby"


def remove_player(game: Game, host: Player, player_id: int) -> dict[str, Any]:
    """Host removes a player from the game.

    Args:
        game: The Game instance.
        host: The acting player; must be the host.
        player_id: The player to remove.

    Returns:
        Dict describing the roster consequence, see ``_remove_from_roster``.

    Raises:
        ForbiddenError: If the caller is not the host.
        NotFoundError: If the player is not in this game.
        ValidationError: If the target is the host.
    """
    assert_host(host, "remove players")
    player = find_player(game, player_id)
    if player.is_host:
        raise ValidationError("The host cannot be removed. End the game instead.")

    request = _leave_request_for(game, player)
    if request is not None:
        db.session.delete(request)
    return _remove_from_roster(game, player)


def request_leave(game: Game, player: Player) -> LeaveRequest:
    """Ask the host for permission to leave.

    Asking again while a request is pending returns that request unchanged;
    a previously denied request is reopened.

    Args:
        game: The Game instance.
        player: The non-host player asking to leave.

    Returns:
        The pending LeaveRequest.

    Raises:
        ForbiddenError: If the caller is the host.
    """
    if player.is_host:
        raise ForbiddenError('The host cannot request to leave. Use "End Game" instead.')

    request = _leave_request_for(game, player)
    if request is None:
        request = LeaveRequest(game_id=game.id, player_id=player.id, player_name=player.name)
        db.session.add(request)
    elif request.status != LeaveRequestStatus.PENDING:
        request.status = LeaveRequestStatus.PENDING
        request.requested_at = datetime.utcnow()
        request.processed_at = None
        request.processed_by = None
    db.session.flush()
    return request


def approve_leave(game: Game, host: Player, player_id: int) -> dict[str, Any]:
    """Grant a pending leave request and remove the player.

    Raises:
        ForbiddenError: If the caller is not the host.
        NotFoundError: If the player or their pending request does not exist.
    """
    assert_host(host, "approve leave requests")
    player = find_player(game, player_id)
    request = _pending_request(game, player)

    request.status = LeaveRequestStatus.APPROVED
    request.processed_at = datetime.utcnow()
    request.processed_by = host.id
    # The approved record outlives the player row
    request.player_id = None
    db.session.flush()

    result = _remove_from_roster(game, player)
    result["leave_request_id"] = request.id
    return result


def deny_leave(game: Game, host: Player, player_id: int) -> LeaveRequest:
    """Refuse a pending leave request; the player stays in the game.

    Raises:
        ForbiddenError: If the caller is not the host.
        NotFoundError: If the player or their pending request does not exist.
    """
    assert_host(host, "deny leave requests")
    player = find_player(game, player_id)
    request = _pending_request(game, player)

    request.status = LeaveRequestStatus.DENIED
    request.processed_at = datetime.utcnow()
    request.processed_by = host.id
    return request


def _remove_from_roster(game: Game, player: Player) -> dict[str, Any]:
    """Delete a player and everything pointing at them, then settle the game.

    In a running game the win rules run first. If nobody has won but the
    roster fell below the minimum, REMOVAL_POLICY decides: "end" stops the
    game without a winner, "reset_lobby" sends everyone back to the lobby.

    Returns:
        Dict with ``removed_player_id``, ``phase``, ``win_state``,
        ``game_ended`` and ``game_reset``.
    """
    removed_id = player.id
    delete_votes_involving(game, player)
    if game.round_state is not None:
        game.round_state.forget_player(removed_id)
    db.session.flush()

    db.session.delete(player)
    db.session.flush()
    db.session.expire(game, ["players"])
    logger.info("game %s: %s left the game", game.code, player.name)

    result = {
        "removed_player_id": removed_id,
        "game_ended": False,
        "game_reset": False,
    }
    running = game.phase not in (GamePhase.LOBBY, GamePhase.ENDED)
    if running and evaluate_win(game) is None:
        minimum = current_app.config["GAME_MIN_PLAYERS"]
        if non_host_count(game) < minimum:
            if current_app.config["REMOVAL_POLICY"] == REMOVAL_RESET_LOBBY:
                _reset_to_lobby(game)
                result["game_reset"] = True
            else:
                game.phase = GamePhase.ENDED
                game.win_state = None
                logger.info("game %s aborted: fewer than %d players remain", game.code, minimum)

    result["game_ended"] = game.phase == GamePhase.ENDED
    result["phase"] = game.phase.value
    result["win_state"] = game.win_state.value if game.win_state else None
    return result


def _reset_to_lobby(game: Game) -> None:
    """Throw away all progress but keep the roster."""
    for vote in db.session.execute(db.select(Vote).where(Vote.game_id == game.id)).scalars():
        db.session.delete(vote)
    for request in db.session.execute(
        db.select(LeaveRequest).where(LeaveRequest.game_id == game.id)
    ).scalars():
        db.session.delete(request)

    get_round_state(game).clear()
    clear_roles(game)
    game.phase = GamePhase.LOBBY
    game.day_count = 0
    game.win_state = None
    logger.info("game %s reset to lobby: not enough players", game.code)


def _leave_request_for(game: Game, player: Player) -> LeaveRequest | None:
    return db.session.execute(
        db.select(LeaveRequest).where(
            LeaveRequest.game_id == game.id,
            LeaveRequest.player_id == player.id,
        )
    ).scalar_one_or_none()


def _pending_request(game: Game, player: Player) -> LeaveRequest:
    request = _leave_request_for(game, player)
    if request is None or request.status != LeaveRequestStatus.PENDING:
        raise NotFoundError(f"{player.name} has no pending leave request.")
    return request

"""Command dispatcher — the single entry point for every game mutation.

Each command runs inside ``game_transaction``: the game is locked, re-read,
validated, mutated, checked for a winner and committed as one unit.
"""
import logging
from typing import Any, Callable
from ..models.game import Game
from ..models.player import Player
from ..errors import ValidationError
from . import game_service, night_service, phase_service, role_service, roster_service, vote_service
from .state_service import leave_request_dict, player_dict, vote_dict
from .transaction import game_transaction, registry_transaction

logger = logging.getLogger(__name__)

Handler = Callable[[Game, Player, dict], dict]


def create_game(host_name: str, client_id: str) -> dict[str, Any]:
    """Create a game and return its id, code and host player."""
    with registry_transaction():
        game, host = game_service.create_game(host_name, client_id)
        result = {
            "game_id": game.id,
            "game_code": game.code,
            "client_id": client_id,
            "player": player_dict(host),
        }
    return result


def join_game(code: str, name: str, client_id: str) -> dict[str, Any]:
    """Join the game with the given code and return the new player."""
    game_id = game_service.resolve_game_by_code(code).id
    with game_transaction(game_id) as game:
        player = game_service.join_game(game, name, client_id)
        result = {
            "game_id": game.id,
            "game_code": game.code,
            "client_id": client_id,
            "player": player_dict(player),
        }
    return result


def execute_command(game_id: int, client_id: str, action: str, data: dict | None = None) -> dict[str, Any]:
    """Run one named command on behalf of a client.

    Args:
        game_id: The game the command targets.
        client_id: The acting browser's identity.
        action: Command name, e.g. ``wolf_select``.
        data: Command arguments such as ``target_id`` or ``player_id``.

    Returns:
        Dict with ``success`` and the command's own result fields.

    Raises:
        AppError: Any engine error; the transaction is rolled back.
    """
    handler = COMMANDS.get(action)
    if handler is None:
        raise ValidationError(f"Unknown action '{action}'.")

    with game_transaction(game_id) as game:
        actor = game_service.resolve_player(game, client_id)
        logger.debug("game %s: %s by %s", game.code, action, actor.name)
        result = handler(game, actor, data or {})
    return {"success": True, **result}


def _id_arg(data: dict, key: str) -> int:
    """Read an integer id argument from command data."""
    value = data.get(key)
    if value is None:
        raise ValidationError(f"{key} is required.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer.") from None


def _assign_roles(game: Game, actor: Player, data: dict) -> dict:
    role_service.assign_roles(game, actor)
    return {}


def _change_role(game: Game, actor: Player, data: dict) -> dict:
    role = data.get("new_role")
    if not role:
        raise ValidationError("new_role is required.")
    player = role_service.change_role(game, actor, _id_arg(data, "player_id"), role)
    return {"player": player_dict(player)}


def _remove_player(game: Game, actor: Player, data: dict) -> dict:
    return roster_service.remove_player(game, actor, _id_arg(data, "player_id"))


def _request_leave(game: Game, actor: Player, data: dict) -> dict:
    request = roster_service.request_leave(game, actor)
    return {"leave_request": leave_request_dict(request)}


def _approve_leave(game: Game, actor: Player, data: dict) -> dict:
    return roster_service.approve_leave(game, actor, _id_arg(data, "player_id"))


def _deny_leave(game: Game, actor: Player, data: dict) -> dict:
    request = roster_service.deny_leave(game, actor, _id_arg(data, "player_id"))
    return {"leave_request": leave_request_dict(request)}


def _advance_phase(game: Game, actor: Player, data: dict) -> dict:
    return phase_service.advance_phase(game, actor)


def _begin_voting(game: Game, actor: Player, data: dict) -> dict:
    phase_service.begin_voting(game, actor)
    return {"phase": game.phase.value}


def _final_vote(game: Game, actor: Player, data: dict) -> dict:
    phase_service.final_vote(game, actor)
    return {"phase": game.phase.value}


def _wolf_select(game: Game, actor: Player, data: dict) -> dict:
    state = night_service.wolf_select(game, actor, _id_arg(data, "target_id"))
    return {"target_id": state.wolf_target_player_id}


def _police_inspect(game: Game, actor: Player, data: dict) -> dict:
    target_id = _id_arg(data, "target_id")
    result = night_service.police_inspect(game, actor, target_id)
    return {"target_id": target_id, "result": result.value}


def _doctor_save(game: Game, actor: Player, data: dict) -> dict:
    state = night_service.doctor_save(game, actor, _id_arg(data, "target_id"))
    return {"target_id": state.doctor_save_player_id}


def _reveal_dead(game: Game, actor: Player, data: dict) -> dict:
    victim = night_service.reveal_dead(game, actor)
    return {
        "dead_player_id": victim.id if victim else None,
        "phase": game.phase.value,
        "win_state": game.win_state.value if game.win_state else None,
    }


def _cast_vote(game: Game, actor: Player, data: dict) -> dict:
    vote = vote_service.cast_vote(game, actor, _id_arg(data, "target_id"))
    return {"vote": vote_dict(vote)}


def _revoke_vote(game: Game, actor: Player, data: dict) -> dict:
    return {"revoked": vote_service.revoke_vote(game, actor)}


def _eliminate_player(game: Game, actor: Player, data: dict) -> dict:
    result = vote_service.eliminate_player(game, actor)
    result["phase"] = game.phase.value
    return result


def _end_game(game: Game, actor: Player, data: dict) -> dict:
    return game_service.end_game(game, actor)


COMMANDS: dict[str, Handler] = {
    "assign_roles": _assign_roles,
    "change_role": _change_role,
    "remove_player": _remove_player,
    "request_leave": _request_leave,
    "approve_leave": _approve_leave,
    "deny_leave": _deny_leave,
    "advance_phase": _advance_phase,
    "next_phase": _advance_phase,
    "begin_voting": _begin_voting,
    "final_vote": _final_vote,
    "wolf_select": _wolf_select,
    "police_inspect": _police_inspect,
    "doctor_save": _doctor_save,
    "reveal_dead": _reveal_dead,
    "cast_vote": _cast_vote,
    "vote": _cast_vote,
    "revoke_vote": _revoke_vote,
    "eliminate_player": _eliminate_player,
    "end_game": _end_game,
}

"""Round engine — the phase state machine driven by the host.

Phase order::

    lobby -> night (3 phases) -> reveal -> day_vote -> day_final_vote -> night ...

with a side exit to ``ended`` once a side wins or the host ends the game.
Each night phase takes two host presses: the first wakes the role
(``phase_started``), the second moves on once the role has acted.
"""
import logging
from flask import current_app
from ..extensions import db
from ..models.game import Game, GamePhase
from ..models.player import Player, PlayerRole
from ..models.round_state import RoundState
from ..errors import InvalidTransitionError
from .guards import assert_host, assert_phase, non_host_count
from .role_service import assert_roster_size, roles_ready

logger = logging.getLogger(__name__)

_NIGHT_PHASE_BY_NAME = {
    "wolf": GamePhase.NIGHT_WOLF,
    "police": GamePhase.NIGHT_POLICE,
    "doctor": GamePhase.NIGHT_DOCTOR,
}

# Role, RoundState attribute and waiting message of each night phase
_REQUIRED_ACTION = {
    GamePhase.NIGHT_WOLF: (PlayerRole.WEREWOLF, "wolf_target_player_id", "the werewolves to pick a target"),
    GamePhase.NIGHT_POLICE: (PlayerRole.POLICE, "police_inspect_player_id", "the police to inspect someone"),
    GamePhase.NIGHT_DOCTOR: (PlayerRole.DOCTOR, "doctor_save_player_id", "the doctor to save someone"),
}


def night_order() -> list[GamePhase]:
    """Return the configured order of the three night phases.

    Raises:
        RuntimeError: If NIGHT_ORDER does not name wolf, police and doctor once each.
    """
    raw = current_app.config["NIGHT_ORDER"]
    names = [part.strip() for part in raw.split(",")]
    if sorted(names) != sorted(_NIGHT_PHASE_BY_NAME) or names[0] != "wolf":
        raise RuntimeError(f"NIGHT_ORDER must list wolf first, then police and doctor; got {raw!r}.")
    return [_NIGHT_PHASE_BY_NAME[name] for name in names]


def get_round_state(game: Game) -> RoundState:
    """Return the game's round state, creating it for games that lack one."""
    if game.round_state is None:
        game.round_state = RoundState(game_id=game.id)
        db.session.flush()
    return game.round_state


def advance_phase(game: Game, host: Player) -> dict:
    """Handle the host's generic "next" button.

    Args:
        game: The Game instance.
        host: The acting player; must be the host.

    Returns:
        Dict with the resulting ``phase`` and what happened (``action``):
        ``night_started``, ``phase_started``, ``phase_advanced`` or
        ``day_skipped``.

    Raises:
        ForbiddenError: If the caller is not the host.
        CapacityError: If leaving the lobby with a roster out of bounds.
        InvalidTransitionError: If the phase cannot be advanced this way yet.
    """
    assert_host(host, "advance the game")

    if game.phase == GamePhase.LOBBY:
        if not roles_ready(game):
            raise InvalidTransitionError("Every player needs a role before the first night.")
        assert_roster_size(non_host_count(game))
        start_night(game, day=1)
        return {"phase": game.phase.value, "action": "night_started"}

    if game.phase.is_night:
        return _advance_night(game)

    if game.phase == GamePhase.REVEAL:
        raise InvalidTransitionError("Reveal the dead, then begin voting.")
    if game.phase == GamePhase.DAY_VOTE:
        raise InvalidTransitionError("Use the final vote to close the first ballot.")
    if game.phase == GamePhase.DAY_FINAL_VOTE:
        from .vote_service import tally_final_votes

        if tally_final_votes(game) is not None:
            raise InvalidTransitionError("A player has the most votes; eliminate them first.")
        # Empty or tied final ballot: nobody is eliminated today
        logger.info("game %s day %s closed without elimination", game.code, game.day_count)
        start_night(game, day=game.day_count + 1)
        return {"phase": game.phase.value, "action": "day_skipped"}

    raise InvalidTransitionError("The game has ended.")


def _advance_night(game: Game) -> dict:
    state = get_round_state(game)
    if not state.phase_started:
        state.phase_started = True
        logger.debug("game %s: %s woken", game.code, game.phase.value)
        return {"phase": game.phase.value, "action": "phase_started"}

    role, attr, waiting_for = _REQUIRED_ACTION[game.phase]
    # A dead role cannot act, so its phase advances without an action
    role_alive = any(p.alive and p.role == role for p in game.players)
    if role_alive and getattr(state, attr) is None:
        raise InvalidTransitionError(f"Waiting for {waiting_for}.")

    order = night_order()
    position = order.index(game.phase)
    game.phase = order[position + 1] if position + 1 < len(order) else GamePhase.REVEAL
    state.phase_started = False
    logger.debug("game %s advanced to %s", game.code, game.phase.value)
    return {"phase": game.phase.value, "action": "phase_advanced"}


def start_night(game: Game, day: int) -> None:
    """Begin a night: set the day counter, clear the scratch pad, wake nobody yet.

    Args:
        game: The Game instance.
        day: The new value of ``day_count``.
    """
    get_round_state(game).clear()
    game.day_count = day
    game.phase = night_order()[0]
    logger.info("game %s: night of day %s begins", game.code, day)


def begin_voting(game: Game, host: Player) -> None:
    """Open the first day ballot once the night's outcome is revealed.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: If not in reveal or the dead are not revealed yet.
    """
    assert_host(host, "begin voting")
    assert_phase(game, GamePhase.REVEAL)
    if not get_round_state(game).revealed:
        raise InvalidTransitionError("Reveal the dead before voting begins.")
    game.phase = GamePhase.DAY_VOTE


def final_vote(game: Game, host: Player) -> None:
    """Close the first ballot and open the final one.

    First-ballot votes are kept as history and can no longer change.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: If not in day_vote.
    """
    assert_host(host, "call the final vote")
    assert_phase(game, GamePhase.DAY_VOTE)
    game.phase = GamePhase.DAY_FINAL_VOTE

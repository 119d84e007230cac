"""Night action service — werewolf, police and doctor choices and the morning reveal."""
import logging
from ..models.game import Game, GamePhase
from ..models.player import Player, PlayerRole
from ..models.round_state import RoundState, InspectResult
from ..errors import ForbiddenError, InvalidTransitionError, ValidationError
from .guards import assert_host, assert_phase, living_target
from .phase_service import get_round_state
from .win_service import evaluate_win

logger = logging.getLogger(__name__)


def wolf_select(game: Game, player: Player, target_id: int) -> RoundState:
    """Record the werewolves' victim for tonight.

    Any living werewolf may pick; a later pick replaces an earlier one.

    Args:
        game: The Game instance.
        player: The acting werewolf.
        target_id: The chosen victim.

    Returns:
        The updated RoundState.

    Raises:
        ForbiddenError: If the caller is not a living werewolf.
        InvalidTransitionError: Outside night_wolf, or before the host woke the wolves.
        ValidationError: If the target is dead, the host, or a werewolf.
    """
    state = _night_action_state(game, player, PlayerRole.WEREWOLF, GamePhase.NIGHT_WOLF)
    target = living_target(game, target_id)
    if target.is_werewolf:
        raise ValidationError("Werewolves cannot target each other.")

    state.wolf_target_player_id = target.id
    return state


def police_inspect(game: Game, player: Player, target_id: int) -> InspectResult:
    """Record the police inspection and compute what it reveals.

    Args:
        game: The Game instance.
        player: The acting police.
        target_id: The inspected player.

    Returns:
        Whether the target is a werewolf.

    Raises:
        ForbiddenError: If the caller is not the living police.
        InvalidTransitionError: Outside night_police, or before the host woke the police.
        ValidationError: If the target is dead, the host, or the police themself.
    """
    state = _night_action_state(game, player, PlayerRole.POLICE, GamePhase.NIGHT_POLICE)
    target = living_target(game, target_id)
    if target.id == player.id:
        raise ValidationError("The police cannot inspect themself.")

    result = InspectResult.WEREWOLF if target.is_werewolf else InspectResult.NOT_WEREWOLF
    state.police_inspect_player_id = target.id
    state.police_inspect_result = result
    return result


def doctor_save(game: Game, player: Player, target_id: int) -> RoundState:
    """Record whom the doctor protects tonight. Self-protection is allowed.

    Raises:
        ForbiddenError: If the caller is not the living doctor.
        InvalidTransitionError: Outside night_doctor, or before the host woke the doctor.
        ValidationError: If the target is dead or the host.
    """
    state = _night_action_state(game, player, PlayerRole.DOCTOR, GamePhase.NIGHT_DOCTOR)
    target = living_target(game, target_id)

    state.doctor_save_player_id = target.id
    return state


def reveal_dead(game: Game, host: Player) -> Player | None:
    """Resolve the night: the wolves' victim dies unless the doctor saved them.

    The win rules run straight after, so a deadly night can end the game.

    Args:
        game: The Game instance, in the reveal phase.
        host: The acting player; must be the host.

    Returns:
        The player who died, or None for a quiet night.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: Outside reveal, or if already revealed.
    """
    assert_host(host, "reveal the dead")
    assert_phase(game, GamePhase.REVEAL)
    state = get_round_state(game)
    if state.revealed:
        raise InvalidTransitionError("Tonight's outcome has already been revealed.")

    victim = None
    wolf_target = state.wolf_target_player_id
    if wolf_target is not None and wolf_target != state.doctor_save_player_id:
        victim = next((p for p in game.players if p.id == wolf_target), None)

    if victim is not None:
        victim.alive = False
        state.resolved_death_player_id = victim.id
        logger.info("game %s day %s: %s was killed in the night", game.code, game.day_count, victim.name)
    else:
        state.resolved_death_player_id = None
        logger.info("game %s day %s: nobody died", game.code, game.day_count)

    state.revealed = True
    evaluate_win(game)
    return victim


def _night_action_state(game: Game, player: Player, role: PlayerRole, phase: GamePhase) -> RoundState:
    """Check that player may act as role right now and return the round state."""
    if player.role != role:
        raise ForbiddenError(f"Only the {role.value} can do this.")
    if not player.alive:
        raise ForbiddenError("Dead players cannot act.")
    assert_phase(game, phase, message=f"The {role.value} can only act during {phase.value}.")

    state = get_round_state(game)
    if not state.phase_started:
        raise InvalidTransitionError("The host has not woken you yet.")
    return state

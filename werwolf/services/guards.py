"""Shared precondition checks used by every engine service."""
from ..models.game import Game, GamePhase
from ..models.player import Player
from ..errors import ForbiddenError, InvalidTransitionError, NotFoundError, ValidationError


def assert_host(player: Player, action: str = "perform this action") -> None:
    """Raise ForbiddenError if player is not the host.

    Args:
        player: The acting player.
        action: Verb phrase used in the error message.

    Raises:
        ForbiddenError: If the player is not the host.
    """
    if not player.is_host:
        raise ForbiddenError(f"Only the host can {action}.")


def assert_phase(game: Game, *phases: GamePhase, message: str | None = None) -> None:
    """Raise InvalidTransitionError unless the game is in one of the phases.

    Args:
        game: The Game instance.
        phases: Accepted phases.
        message: Optional override for the error message.

    Raises:
        InvalidTransitionError: If the current phase is not accepted.
    """
    if game.phase not in phases:
        expected = " or ".join(p.value for p in phases)
        raise InvalidTransitionError(
            message or f"Not allowed during {game.phase.value}; expected {expected}."
        )


def find_player(game: Game, player_id: int) -> Player:
    """Return the player with the given id from this game's roster.

    Args:
        game: The Game instance.
        player_id: Player primary key.

    Returns:
        The matching Player.

    Raises:
        NotFoundError: If no such player is in this game.
    """
    for player in game.players:
        if player.id == player_id:
            return player
    raise NotFoundError("Player not found in this game.")


def living_target(game: Game, player_id: int) -> Player:
    """Return a living, non-host player of this game to act upon.

    Raises:
        NotFoundError: If no such player is in this game.
        ValidationError: If the player is the host or is dead.
    """
    target = find_player(game, player_id)
    if target.is_host:
        raise ValidationError("The host cannot be targeted.")
    if not target.alive:
        raise ValidationError(f"{target.name} is dead and cannot be targeted.")
    return target


def non_host_count(game: Game) -> int:
    """Number of non-host players on the roster, dead or alive."""
    return len(game.non_host_players)

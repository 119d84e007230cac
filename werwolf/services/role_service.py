"""Role assignment — a one-time random deal of roles to the non-host roster."""
import logging
import random
from typing import Sequence
from flask import current_app
from ..models.game import Game, GamePhase
from ..models.player import Player, PlayerRole
from ..errors import CapacityError, ConflictError, ValidationError
from .guards import assert_host, assert_phase, find_player

logger = logging.getLogger(__name__)


def werewolf_count(player_count: int) -> int:
    """Number of werewolves for a roster of the given size.

    Args:
        player_count: Non-host players in the game.

    Returns:
        1 up to 8 players, 2 up to 12, otherwise 3.
    """
    if player_count <= 8:
        return 1
    if player_count <= 12:
        return 2
    return 3


def deal_roles(players: Sequence[Player], rng: random.Random | None = None) -> None:
    """Shuffle the players and set their roles in place.

    The first slots of the shuffled order become werewolves, then one doctor,
    one police, and everyone else is a villager.

    Args:
        players: Non-host players to receive roles.
        rng: Random source; a fresh one is used when omitted.
    """
    shuffled = list(players)
    (rng or random.Random()).shuffle(shuffled)
    wolves = werewolf_count(len(shuffled))

    for index, player in enumerate(shuffled):
        if index < wolves:
            player.role = PlayerRole.WEREWOLF
        elif index == wolves:
            player.role = PlayerRole.DOCTOR
        elif index == wolves + 1:
            player.role = PlayerRole.POLICE
        else:
            player.role = PlayerRole.VILLAGER


def assign_roles(game: Game, host: Player) -> None:
    """Deal roles to every non-host player. Does not change the phase.

    Args:
        game: The Game instance, in the lobby.
        host: The acting player; must be the host.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: If the game has left the lobby.
        ConflictError: If roles were already dealt.
        CapacityError: If the roster size is outside the allowed bounds.
    """
    assert_host(host, "assign roles")
    assert_phase(game, GamePhase.LOBBY, message="Roles can only be assigned in the lobby.")

    players = game.non_host_players
    if any(p.role is not None for p in players):
        raise ConflictError("Roles have already been assigned.")
    assert_roster_size(len(players))

    seed = current_app.config.get("ROLE_SEED")
    deal_roles(players, random.Random(seed) if seed is not None else None)
    logger.info("roles dealt for game %s: %d players, %d werewolves",
                game.code, len(players), werewolf_count(len(players)))


def change_role(game: Game, host: Player, player_id: int, new_role: str) -> Player:
    """Let the host override one player's role before the game starts.

    Args:
        game: The Game instance, in the lobby.
        host: The acting player; must be the host.
        player_id: Player whose role changes.
        new_role: One of villager, werewolf, doctor, police.

    Returns:
        The updated Player.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: If the game has left the lobby.
        ValidationError: If the target is the host or the role is unknown.
        NotFoundError: If the player is not in this game.
    """
    assert_host(host, "change roles")
    assert_phase(game, GamePhase.LOBBY, message="Roles can only be changed in the lobby.")
    role = parse_role(new_role)

    player = find_player(game, player_id)
    if player.is_host:
        raise ValidationError("The host does not have a role.")
    player.role = role
    return player


def parse_role(value: str) -> PlayerRole:
    """Convert a boundary string into a role, rejecting anything unknown."""
    try:
        return PlayerRole(value)
    except ValueError:
        allowed = ", ".join(r.value for r in PlayerRole)
        raise ValidationError(f"Invalid role '{value}'. Must be one of {allowed}.") from None


def assert_roster_size(count: int) -> None:
    """Raise CapacityError unless count is within the configured bounds."""
    low = current_app.config["GAME_MIN_PLAYERS"]
    high = current_app.config["GAME_MAX_PLAYERS"]
    if count < low:
        raise CapacityError(f"At least {low} players besides the host are required; have {count}.")
    if count > high:
        raise CapacityError(f"At most {high} players besides the host are allowed; have {count}.")


def roles_ready(game: Game) -> bool:
    """Return True when every non-host player holds a role."""
    players = game.non_host_players
    return bool(players) and all(p.role is not None for p in players)


def clear_roles(game: Game) -> None:
    """Take every role back and revive everyone, for a return to the lobby."""
    for player in game.non_host_players:
        player.role = None
        player.alive = True


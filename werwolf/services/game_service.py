"""Game registry service — creating, joining, resolving and ending games."""
import logging
from datetime import datetime, time
from typing import Any
from flask import current_app
from ..extensions import db
from ..models.game import Game, GamePhase
from ..models.player import Player
from ..models.round_state import RoundState
from ..models.vote import Vote
from ..models.leave_request import LeaveRequest
from ..utils.code_generator import generate_game_code
from ..errors import (
    CapacityError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from .guards import assert_host, non_host_count

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50
_CODE_ATTEMPTS = 10


def create_game(host_name: str, client_id: str) -> tuple[Game, Player]:
    """Create a new game in the lobby with its host and empty round state.

    The code is unique among games created on the same calendar day (UTC).

    Args:
        host_name: Display name of the host.
        client_id: The host browser's identity.

    Returns:
        The new Game and its host Player.

    Raises:
        ValidationError: If the name is empty or too long.
        ConflictError: If this client already hosts a game that has not ended.
        UnavailableError: If no free code was found.
    """
    host_name = clean_name(host_name)
    hosting = db.session.execute(
        db.select(Game).where(Game.host_client_id == client_id, Game.phase != GamePhase.ENDED)
    ).scalars().first()
    if hosting is not None:
        raise ConflictError(f"You are already hosting game {hosting.code}. End it first.")

    game = Game(code=_mint_code(), host_client_id=client_id, phase=GamePhase.LOBBY, day_count=0)
    db.session.add(game)
    db.session.flush()  # Get game.id without committing

    host = Player(game_id=game.id, client_id=client_id, name=host_name, is_host=True, alive=True)
    db.session.add(host)
    db.session.add(RoundState(game_id=game.id))
    db.session.flush()

    logger.info("game %s created by %s", game.code, host_name)
    return game, host


def join_game(game: Game, name: str, client_id: str) -> Player:
    """Add a player to a game that is still in the lobby.

    Args:
        game: The Game instance.
        name: Desired display name.
        client_id: The joining browser's identity.

    Returns:
        The new Player.

    Raises:
        ValidationError: If the name is empty or too long.
        InvalidTransitionError: If the game has already started.
        ConflictError: If this browser is already in the game.
        CapacityError: If the game is full.
    """
    name = clean_name(name)
    if game.phase != GamePhase.LOBBY:
        raise InvalidTransitionError("This game has already started and is not accepting new players.")
    if any(p.client_id == client_id for p in game.players):
        raise ConflictError("You are already in this game from this browser.")

    maximum = current_app.config["GAME_MAX_PLAYERS"]
    if non_host_count(game) + 1 > maximum:
        raise CapacityError(f"Game is full (max {maximum} players).")

    player = Player(game_id=game.id, client_id=client_id, name=name, is_host=False, alive=True)
    db.session.add(player)
    db.session.flush()
    db.session.expire(game, ["players"])
    logger.info("game %s: %s joined", game.code, name)
    return player


def resolve_game_by_code(code: str) -> Game:
    """Fetch the most recently created game with this code.

    Args:
        code: The 6-digit game code.

    Returns:
        The Game instance.

    Raises:
        NotFoundError: If no game has that code.
    """
    game = db.session.execute(
        db.select(Game).where(Game.code == code.strip()).order_by(Game.created_at.desc(), Game.id.desc())
    ).scalars().first()
    if game is None:
        raise NotFoundError()
    return game


def resolve_game_by_id(game_id: int) -> Game:
    """Fetch a game by primary key.

    Raises:
        NotFoundError: If the game does not exist.
    """
    game = db.session.get(Game, game_id)
    if game is None:
        raise NotFoundError()
    return game


def resolve_player(game: Game, client_id: str) -> Player:
    """Find the caller's player row in this game.

    Raises:
        NotFoundError: If this client is not part of the game.
    """
    for player in game.players:
        if player.client_id == client_id:
            return player
    raise NotFoundError("Player not found in this game.")


def end_game(game: Game, host: Player) -> dict[str, Any]:
    """Delete a game and all of its rows. Allowed in any phase.

    Children are deleted one table at a time so foreign keys are never
    violated and every deleted row reaches the change feed.

    Args:
        game: The Game instance.
        host: The acting player; must be the host.

    Raises:
        ForbiddenError: If the caller is not the host.
    """
    assert_host(host, "end the game")
    game_id = game.id

    for model in (Vote, LeaveRequest, RoundState, Player):
        rows = db.session.execute(
            db.select(model).where(model.game_id == game_id)
        ).scalars().all()
        for row in rows:
            db.session.delete(row)
        db.session.flush()

    db.session.expire(game, ["players", "round_state"])
    db.session.delete(game)
    db.session.flush()
    logger.info("game %s deleted", game.code)
    return {"deleted": True, "game_id": game_id}


def clean_name(name: str | None) -> str:
    """Trim a display name and check its length.

    Raises:
        ValidationError: If the name is empty or longer than 50 characters.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("A name is required.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Names must be {MAX_NAME_LENGTH} characters or fewer.")
    return name


def _mint_code() -> str:
    """Return a code no game created today is using."""
    start_of_day = datetime.combine(datetime.utcnow().date(), time.min)
    for _ in range(_CODE_ATTEMPTS):
        code = generate_game_code()
        existing = db.session.execute(
            db.select(Game.id).where(Game.code == code, Game.created_at >= start_of_day)
        ).first()
        if existing is None:
            return code
    raise UnavailableError("Could not find a free game code. Please try again.")

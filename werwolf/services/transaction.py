"""Per-game transactions: one lock, one fresh read, one commit per command."""
import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from ..extensions import db
from ..models.game import Game, GamePhase
from ..utils.game_locks import game_lock, registry_lock, release_game_lock
from ..errors import ConflictError, NotFoundError, UnavailableError

logger = logging.getLogger(__name__)


def load_game_for_update(game_id: int) -> Game:
    """Read the latest committed game row and lock it until commit.

    ``populate_existing`` overwrites anything cached in the session identity
    map, so validation never runs against a superseded phase.

    Args:
        game_id: Primary key of the game.

    Returns:
        The Game instance.

    Raises:
        NotFoundError: If the game does not exist.
    """
    game = db.session.execute(
        db.select(Game)
        .where(Game.id == game_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if game is None:
        raise NotFoundError()
    # Children may be cached from an earlier command in this session
    db.session.expire(game, ["players", "round_state"])
    return game


@contextmanager
def game_transaction(game_id: int) -> Iterator[Game]:
    """Run a block as one serialized, atomic command against a game.

    Commits on success. Any exception rolls the whole command back, so a
    command never leaves a partial mutation behind. Once a committed command
    has ended or deleted the game, its lock is dropped from the registry.

    Args:
        game_id: Primary key of the game.

    Yields:
        The freshly loaded, row-locked Game.

    Raises:
        UnavailableError: If the database connection failed.
        ConflictError: If a unique constraint rejected a concurrent write.
    """
    with game_lock(game_id):
        with _atomic():
            game = load_game_for_update(game_id)
            yield game
            finished = inspect(game).deleted or game.phase == GamePhase.ENDED
        if finished:
            release_game_lock(game_id)


@contextmanager
def registry_transaction() -> Iterator[None]:
    """Run a block that creates games, serialized against other creations."""
    with registry_lock:
        with _atomic():
            yield


@contextmanager
def _atomic() -> Iterator[None]:
    try:
        yield
        db.session.commit()
    except (OperationalError, InterfaceError) as err:
        db.session.rollback()
        logger.warning("storage unavailable: %s", err)
        raise UnavailableError() from err
    except IntegrityError as err:
        db.session.rollback()
        logger.info("concurrent write rejected: %s", err.orig)
        raise ConflictError("The game changed while your action was processed. Reload and retry.") from err
    except Exception:
        db.session.rollback()
        raise

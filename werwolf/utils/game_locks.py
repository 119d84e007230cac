"""Per-game mutexes serializing every mutating engine command.

Held in process memory, which is enough for a single-instance deployment.
Cross-process exclusion comes from the row lock taken in services.transaction.
"""
import threading
from contextlib import contextmanager
from typing import Iterator

_locks: dict[int, threading.RLock] = {}
_registry_lock = threading.Lock()

# Serializes code minting in create_game, where no game id exists yet
registry_lock = threading.RLock()


@contextmanager
def game_lock(game_id: int) -> Iterator[None]:
    """Hold the mutex for one game for the duration of the block.

    Args:
        game_id: Primary key of the game.
    """
    with _registry_lock:
        lock = _locks.setdefault(game_id, threading.RLock())
    with lock:
        yield


def release_game_lock(game_id: int) -> None:
    """Forget the mutex of an ended or deleted game.

    Args:
        game_id: Primary key of the game.
    """
    with _registry_lock:
        _locks.pop(game_id, None)

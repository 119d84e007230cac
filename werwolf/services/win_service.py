"""Win evaluation — runs after every death, elimination and mid-game removal."""
import logging
from typing import Iterable
from ..models.game import Game, GamePhase, WinState
from ..models.player import Player

logger = logging.getLogger(__name__)


def compute_win_state(players: Iterable[Player]) -> WinState | None:
    """Decide whether the roster has reached a terminal state.

    The host never counts. Rules, first match wins:

    - no werewolf alive: villagers win
    - living werewolves at least match everyone else alive: werewolves win
    - exactly two living players: forced end, werewolves win if one is alive

    Args:
        players: Every player of the game, host included.

    Returns:
        The winning side, or None while the game goes on.
    """
    alive = [p for p in players if p.alive and not p.is_host]
    wolves = sum(1 for p in alive if p.is_werewolf)
    others = len(alive) - wolves

    if wolves == 0:
        return WinState.VILLAGERS
    if wolves >= others:
        return WinState.WEREWOLVES
    if len(alive) == 2:
        return WinState.WEREWOLVES if wolves > 0 else WinState.VILLAGERS
    return None


def evaluate_win(game: Game) -> WinState | None:
    """Apply the win rules to a running game, ending it on a result.

    Only ``win_state`` and ``phase`` are written; ``alive`` is never touched.
    Games in the lobby or already ended are left alone.

    Args:
        game: The Game instance.

    Returns:
        The winning side if the game has just ended, otherwise None.
    """
    if game.phase in (GamePhase.LOBBY, GamePhase.ENDED):
        return None

    win_state = compute_win_state(game.players)
    if win_state is not None:
        game.win_state = win_state
        game.phase = GamePhase.ENDED
        logger.info("game %s ended on day %s: %s win", game.code, game.day_count, win_state.value)
    return win_state

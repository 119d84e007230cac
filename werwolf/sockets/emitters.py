"""Socket.IO emitter helpers — the only place that calls socketio.emit()."""
import logging
from typing import Any, Iterable
from ..extensions import socketio

logger = logging.getLogger(__name__)

# Columns that would leak secret roles or night actions to the whole room
SECRET_COLUMNS: dict[str, frozenset[str]] = {
    "players": frozenset({"role", "client_id"}),
    "games": frozenset({"host_client_id"}),
    "round_state": frozenset({
        "wolf_target_player_id",
        "police_inspect_player_id",
        "police_inspect_result",
        "doctor_save_player_id",
    }),
}


def game_room(game_id: int) -> str:
    """Return the Socket.IO room name for a game.

    Args:
        game_id: Primary key of the game.
    """
    return f"game:{game_id}"


def public_row(table: str, row: dict[str, Any]) -> dict[str, Any]:
    """Strip secret columns from a changed row before broadcasting it.

    Args:
        table: Table name the row belongs to.
        row: Column values of the changed row.

    Returns:
        A copy of the row without secret columns.
    """
    hidden = SECRET_COLUMNS.get(table, frozenset())
    return {key: value for key, value in row.items() if key not in hidden}


def emit_row_changes(changes: Iterable[dict[str, Any]]) -> None:
    """Broadcast committed row changes to the rooms of their games.

    Payloads carry the changed row, not a diff; clients re-read the game
    state rather than patching it.

    Args:
        changes: Dicts with ``game_id``, ``table``, ``type`` and ``row``.
    """
    for change in changes:
        payload = {
            "table": change["table"],
            "type": change["type"],
            "row": public_row(change["table"], change["row"]),
        }
        socketio.emit("row_changed", payload, to=game_room(change["game_id"]))
        logger.debug("row_changed %s %s for game %s", change["type"], change["table"], change["game_id"])

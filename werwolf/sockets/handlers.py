"""Socket.IO event handlers."""
from flask_socketio import join_room, leave_room
from ..extensions import socketio, db
from ..models.player import Player
from ..models.game import Game
from .emitters import game_room


@socketio.on("join_game_room")
def handle_join_game_room(data: dict) -> dict:
    """Subscribe a client's socket to the change feed of its game.

    Args:
        data: Dict containing game_code and client_id.

    Returns:
        Acknowledgement with ``joined`` and, on success, ``game_id``.
    """
    player = _player_for(data)
    if player is None:
        return {"joined": False}
    join_room(game_room(player.game_id))
    return {"joined": True, "game_id": player.game_id}


@socketio.on("leave_game_room")
def handle_leave_game_room(data: dict) -> dict:
    """Unsubscribe a client's socket from its game.

    Args:
        data: Dict containing game_code and client_id.
    """
    player = _player_for(data)
    if player is None:
        return {"left": False}
    leave_room(game_room(player.game_id))
    return {"left": True}


def _player_for(data: dict) -> Player | None:
    """Look up the player a socket claims to be, or None."""
    game_code = (data.get("game_code") or "").strip()
    client_id = data.get("client_id") or ""
    if not game_code or not client_id:
        return None

    game = db.session.execute(
        db.select(Game).where(Game.code == game_code).order_by(Game.created_at.desc(), Game.id.desc())
    ).scalars().first()
    if game is None:
        return None

    return db.session.execute(
        db.select(Player).where(Player.game_id == game.id, Player.client_id == client_id)
    ).scalar_one_or_none()

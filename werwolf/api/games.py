"""All /api/games/* REST routes."""
from flask import Blueprint, request, jsonify, g
from ..api.auth import require_client_id, client_id_from_body
from ..services import command_service, game_service
from ..services.state_service import build_game_state_payload
from ..errors import ValidationError

games_bp = Blueprint("games", __name__)


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


# ---------------------------------------------------------------------------
# Create game
# ---------------------------------------------------------------------------

@games_bp.route("/games", methods=["POST"])
def create_game():
    """POST /api/games — create a new game with the caller as host."""
    data = _json_body()
    result = command_service.create_game(
        host_name=data.get("host_name"),
        client_id=client_id_from_body(data),
    )
    return jsonify(result), 201


# ---------------------------------------------------------------------------
# Join game
# ---------------------------------------------------------------------------

@games_bp.route("/games/<code>/join", methods=["POST"])
def join_game(code: str):
    """POST /api/games/<code>/join — join a lobby as a player."""
    data = _json_body()
    result = command_service.join_game(
        code=code,
        name=data.get("name"),
        client_id=client_id_from_body(data),
    )
    return jsonify(result), 201


# ---------------------------------------------------------------------------
# Get game state
# ---------------------------------------------------------------------------

@games_bp.route("/games/<code>", methods=["GET"])
@require_client_id
def get_game(code: str):
    """GET /api/games/<code> — game snapshot as seen by the caller."""
    game = game_service.resolve_game_by_code(code)
    viewer = next((p for p in game.players if p.client_id == g.client_id), None)
    return jsonify(build_game_state_payload(game, viewer)), 200


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@games_bp.route("/games/<int:game_id>/actions", methods=["POST"])
@require_client_id
def game_action(game_id: int):
    """POST /api/games/<id>/actions — run one engine command."""
    data = _json_body()
    action = data.get("action")
    if not action:
        raise ValidationError("action is required.")
    args = data.get("data") or {}
    if not isinstance(args, dict):
        raise ValidationError("data must be a JSON object.")

    result = command_service.execute_command(game_id, g.client_id, action, args)
    return jsonify(result), 200

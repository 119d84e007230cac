import pytest

from werwolf import create_app
from werwolf.extensions import db
from werwolf.models import Game, Player, PlayerRole
from werwolf.services import command_service


class Table:
    """A game under test: one host plus numbered players, driven through the dispatcher."""

    def __init__(self, game_id: int, code: str, player_ids: list[str]) -> None:
        self.game_id = game_id
        self.code = code
        self.host = "host"
        self.players = player_ids

    def act(self, client_id: str, action: str, **data):
        return command_service.execute_command(self.game_id, client_id, action, data)

    def host_act(self, action: str, **data):
        return self.act(self.host, action, **data)

    @property
    def game(self) -> Game:
        db.session.expire_all()
        return db.session.get(Game, self.game_id)

    def player(self, client_id: str) -> Player:
        db.session.expire_all()
        return db.session.execute(
            db.select(Player).where(Player.game_id == self.game_id, Player.client_id == client_id)
        ).scalar_one()

    def pid(self, client_id: str) -> int:
        return self.player(client_id).id

    def with_role(self, role: PlayerRole) -> list[str]:
        return [p.client_id for p in self.game.players if p.role == role]

    def set_roles(self, roles: dict[str, PlayerRole]) -> None:
        for client_id, role in roles.items():
            self.player(client_id).role = role
            db.session.flush()
        db.session.commit()

    def kill(self, client_id: str) -> None:
        self.player(client_id).alive = False
        db.session.commit()

    def start(self, roles: dict[str, PlayerRole] | None = None) -> None:
        """Deal roles (or set the given ones) and enter the first night."""
        if roles is None:
            self.host_act("assign_roles")
        else:
            self.set_roles(roles)
        self.host_act("advance_phase")

    def play_night(self, wolf_target: str | None = None, inspect: str | None = None,
                   save: str | None = None) -> None:
        """Walk the host through all three night phases, one action per role."""
        for _ in range(3):
            phase = self.game.phase.value
            self.host_act("advance_phase")
            actor, action, target = {
                "night_wolf": (self._alive("werewolf"), "wolf_select", wolf_target),
                "night_police": (self._alive("police"), "police_inspect", inspect),
                "night_doctor": (self._alive("doctor"), "doctor_save", save),
            }[phase]
            if actor is not None and target is not None:
                self.act(actor, action, target_id=self.pid(target))
            self.host_act("advance_phase")

    def _alive(self, role: str) -> str | None:
        return next(
            (p.client_id for p in self.game.players if p.alive and p.role == PlayerRole(role)),
            None,
        )


@pytest.fixture()
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_table(app):
    def _make(player_count: int = 6) -> Table:
        created = command_service.create_game("Host", "host")
        player_ids = []
        for i in range(1, player_count + 1):
            client_id = f"p{i}"
            command_service.join_game(created["game_code"], f"Player {i}", client_id)
            player_ids.append(client_id)
        return Table(created["game_id"], created["game_code"], player_ids)

    return _make


@pytest.fixture()
def classic_roles():
    """Six players: p1 werewolf, p2 doctor, p3 police, p4-p6 villagers."""
    return {
        "p1": PlayerRole.WEREWOLF,
        "p2": PlayerRole.DOCTOR,
        "p3": PlayerRole.POLICE,
        "p4": PlayerRole.VILLAGER,
        "p5": PlayerRole.VILLAGER,
        "p6": PlayerRole.VILLAGER,
    }

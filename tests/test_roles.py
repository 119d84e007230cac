import random
from collections import Counter

import pytest

from werwolf.errors import CapacityError, ConflictError, ForbiddenError, InvalidTransitionError, ValidationError
from werwolf.models import Player, PlayerRole
from werwolf.services.role_service import deal_roles, werewolf_count


@pytest.mark.parametrize(
    "count, wolves",
    [(6, 1), (8, 1), (9, 2), (12, 2), (13, 3), (20, 3)],
)
def test_werewolf_count_table(count: int, wolves: int) -> None:
    assert werewolf_count(count) == wolves


@pytest.mark.parametrize("count", [6, 7, 9, 13, 20])
def test_deal_roles_distribution(count: int) -> None:
    players = [Player(name=f"p{i}", is_host=False) for i in range(count)]
    deal_roles(players, random.Random(7))

    roles = Counter(p.role for p in players)
    assert roles[PlayerRole.WEREWOLF] == werewolf_count(count)
    assert roles[PlayerRole.DOCTOR] == 1
    assert roles[PlayerRole.POLICE] == 1
    assert roles[PlayerRole.VILLAGER] == count - werewolf_count(count) - 2


def test_assign_roles_for_seven_player_table(make_table) -> None:
    table = make_table(6)
    table.host_act("assign_roles")

    game = table.game
    host = game.host
    roles = Counter(p.role for p in game.non_host_players)
    assert host.role is None
    assert roles == {
        PlayerRole.WEREWOLF: 1,
        PlayerRole.DOCTOR: 1,
        PlayerRole.POLICE: 1,
        PlayerRole.VILLAGER: 3,
    }
    assert game.phase.value == "lobby"


def test_assign_roles_cannot_reshuffle(make_table) -> None:
    table = make_table(6)
    table.host_act("assign_roles")
    before = {p.id: p.role for p in table.game.players}

    with pytest.raises(ConflictError):
        table.host_act("assign_roles")
    assert {p.id: p.role for p in table.game.players} == before


def test_assign_roles_needs_six_players(make_table) -> None:
    table = make_table(5)
    with pytest.raises(CapacityError):
        table.host_act("assign_roles")
    assert all(p.role is None for p in table.game.players)


def test_only_host_assigns_roles(make_table) -> None:
    table = make_table(6)
    with pytest.raises(ForbiddenError):
        table.act("p1", "assign_roles")


def test_change_role_in_lobby(make_table) -> None:
    table = make_table(6)
    table.host_act("assign_roles")

    result = table.host_act("change_role", player_id=table.pid("p4"), new_role="police")

    assert result["player"]["role"] == "police"
    assert table.player("p4").role == PlayerRole.POLICE


def test_change_role_rejects_unknown_role(make_table) -> None:
    table = make_table(6)
    with pytest.raises(ValidationError):
        table.host_act("change_role", player_id=table.pid("p1"), new_role="werwolf")


def test_change_role_rejects_host_target(make_table) -> None:
    table = make_table(6)
    with pytest.raises(ValidationError):
        table.host_act("change_role", player_id=table.pid("host"), new_role="villager")
    assert table.player("host").role is None


def test_change_role_only_in_lobby(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    with pytest.raises(InvalidTransitionError):
        table.host_act("change_role", player_id=table.pid("p4"), new_role="werewolf")


def test_every_player_has_a_role_once_the_game_starts(make_table) -> None:
    table = make_table(8)
    table.start()

    game = table.game
    assert game.phase.value == "night_wolf"
    assert game.day_count == 1
    assert sum(1 for p in game.players if p.is_host) == 1
    assert game.host.role is None
    assert all(p.role is not None for p in game.non_host_players)


def test_first_night_requires_roles(make_table) -> None:
    table = make_table(6)
    with pytest.raises(InvalidTransitionError):
        table.host_act("advance_phase")

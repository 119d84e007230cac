import pytest

from werwolf.errors import ForbiddenError, InvalidTransitionError, ValidationError
from werwolf.models import GamePhase, PlayerRole
from werwolf.services import command_service


def test_seven_player_night_with_a_doctor_save(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    assert table.game.phase == GamePhase.NIGHT_WOLF

    table.play_night(wolf_target="p4", inspect="p1", save="p4")
    assert table.game.phase == GamePhase.REVEAL

    result = table.host_act("reveal_dead")
    assert result["dead_player_id"] is None
    table.host_act("begin_voting")

    game = table.game
    assert game.phase == GamePhase.DAY_VOTE
    assert game.day_count == 1
    assert game.win_state is None
    assert all(p.alive for p in game.non_host_players)


def test_unsaved_victim_dies_at_reveal(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.play_night(wolf_target="p4", inspect="p5", save="p6")

    # Death is not applied before the reveal
    assert table.player("p4").alive

    result = table.host_act("reveal_dead")
    assert result["dead_player_id"] == table.pid("p4")
    assert not table.player("p4").alive
    assert table.game.round_state.resolved_death_player_id == table.pid("p4")


def test_each_night_phase_needs_two_host_presses(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)

    with pytest.raises(InvalidTransitionError):
        table.act("p1", "wolf_select", target_id=table.pid("p4"))

    assert table.host_act("advance_phase")["action"] == "phase_started"
    with pytest.raises(InvalidTransitionError):
        table.host_act("advance_phase")

    table.act("p1", "wolf_select", target_id=table.pid("p4"))
    result = table.host_act("advance_phase")
    assert result == {"success": True, "phase": "night_police", "action": "phase_advanced"}
    assert table.game.round_state.phase_started is False


def test_only_host_advances(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    with pytest.raises(ForbiddenError):
        table.act("p1", "advance_phase")
    assert table.game.phase == GamePhase.NIGHT_WOLF


def test_night_actions_check_the_role(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.host_act("advance_phase")

    with pytest.raises(ForbiddenError):
        table.act("p4", "wolf_select", target_id=table.pid("p5"))
    with pytest.raises(ForbiddenError):
        table.host_act("wolf_select", target_id=table.pid("p5"))
    with pytest.raises(ValidationError):
        table.act("p1", "wolf_select", target_id=table.pid("p1"))
    with pytest.raises(ValidationError):
        table.act("p1", "wolf_select", target_id=table.pid("host"))


def test_last_wolf_choice_wins(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.host_act("advance_phase")

    table.act("p1", "wolf_select", target_id=table.pid("p4"))
    table.act("p1", "wolf_select", target_id=table.pid("p5"))

    assert table.game.round_state.wolf_target_player_id == table.pid("p5")


def test_police_learns_whether_the_target_is_a_werewolf(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.host_act("advance_phase")
    table.act("p1", "wolf_select", target_id=table.pid("p4"))
    table.host_act("advance_phase")
    table.host_act("advance_phase")

    assert table.act("p3", "police_inspect", target_id=table.pid("p1"))["result"] == "werewolf"
    assert table.act("p3", "police_inspect", target_id=table.pid("p5"))["result"] == "not_werewolf"
    with pytest.raises(ValidationError):
        table.act("p3", "police_inspect", target_id=table.pid("p3"))


def test_doctor_may_protect_themself(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.play_night(wolf_target="p2", inspect="p4", save="p2")

    assert table.host_act("reveal_dead")["dead_player_id"] is None
    assert table.player("p2").alive


def test_alternate_night_order(app, make_table, classic_roles) -> None:
    app.config["NIGHT_ORDER"] = "wolf,doctor,police"
    table = make_table(6)
    table.start(classic_roles)
    table.host_act("advance_phase")
    table.act("p1", "wolf_select", target_id=table.pid("p4"))

    assert table.host_act("advance_phase")["phase"] == "night_doctor"
    table.host_act("advance_phase")
    table.act("p2", "doctor_save", target_id=table.pid("p4"))
    assert table.host_act("advance_phase")["phase"] == "night_police"


def test_dead_role_does_not_block_the_night(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.kill("p3")

    table.play_night(wolf_target="p4", save="p5")

    assert table.game.phase == GamePhase.REVEAL
    table.host_act("reveal_dead")
    assert not table.player("p4").alive


def test_reveal_happens_once(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.play_night(wolf_target="p4", inspect="p1", save="p5")

    with pytest.raises(InvalidTransitionError):
        table.host_act("begin_voting")
    with pytest.raises(InvalidTransitionError):
        table.host_act("advance_phase")

    table.host_act("reveal_dead")
    with pytest.raises(InvalidTransitionError):
        table.host_act("reveal_dead")


def test_begin_voting_only_from_reveal(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    with pytest.raises(InvalidTransitionError):
        table.host_act("begin_voting")


def test_deadly_night_can_end_the_game(make_table) -> None:
    table = make_table(6)
    table.start({
        "p1": PlayerRole.WEREWOLF, "p2": PlayerRole.WEREWOLF, "p3": PlayerRole.POLICE,
        "p4": PlayerRole.DOCTOR, "p5": PlayerRole.VILLAGER, "p6": PlayerRole.VILLAGER,
    })
    table.kill("p5")
    table.kill("p6")
    table.play_night(wolf_target="p4", inspect="p1", save="p3")

    result = table.host_act("reveal_dead")

    assert result["phase"] == "ended"
    assert result["win_state"] == "werewolves"
    game = table.game
    assert game.phase == GamePhase.ENDED
    with pytest.raises(InvalidTransitionError):
        table.host_act("advance_phase")


def test_round_state_is_cleared_for_the_next_night(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    table.play_night(wolf_target="p4", inspect="p1", save="p5")
    table.host_act("reveal_dead")
    table.host_act("begin_voting")
    table.host_act("final_vote")
    table.host_act("advance_phase")

    game = table.game
    state = game.round_state
    assert game.phase == GamePhase.NIGHT_WOLF
    assert game.day_count == 2
    assert state.wolf_target_player_id is None
    assert state.police_inspect_result is None
    assert state.doctor_save_player_id is None
    assert state.resolved_death_player_id is None
    assert state.revealed is False
    assert state.phase_started is False


def test_unknown_action_is_rejected(make_table) -> None:
    table = make_table(6)
    with pytest.raises(ValidationError):
        table.host_act("skip_night")


def test_failed_command_changes_nothing(monkeypatch, make_table) -> None:
    def _half_done(game, actor, data):
        game.day_count = 99
        raise ValidationError("boom")

    monkeypatch.setitem(command_service.COMMANDS, "half_done", _half_done)
    table = make_table(6)

    with pytest.raises(ValidationError):
        table.host_act("half_done")
    assert table.game.day_count == 0

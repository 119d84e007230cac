import pytest

from werwolf.errors import ForbiddenError, InvalidTransitionError, ValidationError
from werwolf.extensions import db
from werwolf.models import GamePhase, Vote, VotePhase, WinState


@pytest.fixture()
def daytime(make_table, classic_roles):
    """A six-player table in day_vote of day 1; p4 died in the night."""
    table = make_table(6)
    table.start(classic_roles)
    table.play_night(wolf_target="p4", inspect="p1", save="p5")
    table.host_act("reveal_dead")
    table.host_act("begin_voting")
    return table


def _votes(table, phase: VotePhase) -> list[Vote]:
    db.session.expire_all()
    return db.session.execute(
        db.select(Vote).where(Vote.game_id == table.game_id, Vote.phase == phase)
    ).scalars().all()


def _final_ballot(table, ballots: dict[str, str]) -> None:
    table.host_act("final_vote")
    for voter, target in ballots.items():
        table.act(voter, "cast_vote", target_id=table.pid(target))


def test_a_second_vote_replaces_the_first(daytime) -> None:
    daytime.act("p2", "cast_vote", target_id=daytime.pid("p1"))
    daytime.act("p2", "cast_vote", target_id=daytime.pid("p5"))

    votes = _votes(daytime, VotePhase.DAY_VOTE)
    assert len(votes) == 1
    assert votes[0].target_player_id == daytime.pid("p5")
    assert votes[0].round == 1


def test_host_and_dead_players_cannot_vote(daytime) -> None:
    with pytest.raises(ForbiddenError):
        daytime.host_act("cast_vote", target_id=daytime.pid("p1"))
    with pytest.raises(ForbiddenError):
        daytime.act("p4", "cast_vote", target_id=daytime.pid("p1"))
    assert _votes(daytime, VotePhase.DAY_VOTE) == []


def test_vote_targets_must_be_living_others(daytime) -> None:
    with pytest.raises(ValidationError):
        daytime.act("p2", "cast_vote", target_id=daytime.pid("p4"))
    with pytest.raises(ValidationError):
        daytime.act("p2", "cast_vote", target_id=daytime.pid("p2"))
    with pytest.raises(ValidationError):
        daytime.act("p2", "cast_vote", target_id=daytime.pid("host"))


def test_no_voting_at_night(make_table, classic_roles) -> None:
    table = make_table(6)
    table.start(classic_roles)
    with pytest.raises(InvalidTransitionError):
        table.act("p2", "cast_vote", target_id=table.pid("p1"))


def test_revoke_vote(daytime) -> None:
    daytime.act("p2", "cast_vote", target_id=daytime.pid("p1"))

    assert daytime.act("p2", "revoke_vote")["revoked"] is True
    assert daytime.act("p2", "revoke_vote")["revoked"] is False
    assert _votes(daytime, VotePhase.DAY_VOTE) == []


def test_first_ballot_does_not_count_in_the_final(daytime) -> None:
    daytime.act("p2", "cast_vote", target_id=daytime.pid("p6"))
    daytime.act("p3", "cast_vote", target_id=daytime.pid("p6"))
    daytime.host_act("final_vote")

    # First-ballot votes are history now
    with pytest.raises(ValidationError):
        daytime.host_act("eliminate_player")
    assert len(_votes(daytime, VotePhase.DAY_VOTE)) == 2


def test_elimination_starts_the_next_night(daytime) -> None:
    _final_ballot(daytime, {"p1": "p6", "p2": "p6", "p3": "p6", "p5": "p2"})

    result = daytime.host_act("eliminate_player")

    assert result["eliminated_player_id"] == daytime.pid("p6")
    assert result["was_werewolf"] is False
    assert result["win_state"] is None
    game = daytime.game
    assert game.phase == GamePhase.NIGHT_WOLF
    assert game.day_count == 2
    assert not daytime.player("p6").alive


def test_eliminating_the_last_werewolf_ends_the_game(daytime) -> None:
    _final_ballot(daytime, {"p2": "p1", "p3": "p1", "p5": "p1"})

    result = daytime.host_act("eliminate_player")

    assert result["was_werewolf"] is True
    assert result["win_state"] == "villagers"
    game = daytime.game
    assert game.phase == GamePhase.ENDED
    assert game.win_state == WinState.VILLAGERS


def test_tie_eliminates_nobody(daytime) -> None:
    _final_ballot(daytime, {"p2": "p1", "p3": "p1", "p1": "p2", "p5": "p2"})

    with pytest.raises(ValidationError):
        daytime.host_act("eliminate_player")
    assert all(daytime.player(c).alive for c in ("p1", "p2", "p3", "p5", "p6"))
    assert daytime.game.phase == GamePhase.DAY_FINAL_VOTE

    result = daytime.host_act("advance_phase")
    assert result["action"] == "day_skipped"
    game = daytime.game
    assert game.phase == GamePhase.NIGHT_WOLF
    assert game.day_count == 2


def test_cannot_skip_a_clear_result(daytime) -> None:
    _final_ballot(daytime, {"p2": "p1", "p3": "p1"})
    with pytest.raises(InvalidTransitionError):
        daytime.host_act("advance_phase")


def test_only_host_eliminates(daytime) -> None:
    _final_ballot(daytime, {"p2": "p1", "p3": "p1"})
    with pytest.raises(ForbiddenError):
        daytime.act("p2", "eliminate_player")
    assert daytime.player("p1").alive


def test_eliminate_only_in_final_vote(daytime) -> None:
    daytime.act("p2", "cast_vote", target_id=daytime.pid("p1"))
    with pytest.raises(InvalidTransitionError):
        daytime.host_act("eliminate_player")

"""Vote service — daytime ballots, tally and elimination."""
import logging
from typing import Any
from ..extensions import db
from ..models.game import Game, GamePhase
from ..models.player import Player
from ..models.vote import Vote, VotePhase
from ..errors import ForbiddenError, ValidationError
from .guards import assert_host, assert_phase, find_player, living_target
from .phase_service import start_night
from .win_service import evaluate_win

logger = logging.getLogger(__name__)


def cast_vote(game: Game, voter: Player, target_id: int) -> Vote:
    """Record or replace a ballot for the current day and vote phase.

    Args:
        game: The Game instance.
        voter: The living, non-host player voting.
        target_id: The player voted against.

    Returns:
        The created or updated Vote.

    Raises:
        InvalidTransitionError: Outside the two day ballots.
        ForbiddenError: If the voter is the host or dead.
        ValidationError: If the target is dead, the host, or the voter.
    """
    phase = _ballot_phase(game, voter)
    target = living_target(game, target_id)
    if target.id == voter.id:
        raise ValidationError("You cannot vote for yourself.")

    vote = _current_ballot(game, voter, phase)
    if vote is None:
        vote = Vote(
            game_id=game.id,
            voter_player_id=voter.id,
            target_player_id=target.id,
            round=game.day_count,
            phase=phase,
        )
        db.session.add(vote)
    else:
        vote.target_player_id = target.id
    db.session.flush()
    return vote


def revoke_vote(game: Game, voter: Player) -> bool:
    """Withdraw the voter's ballot for the current day and vote phase.

    Returns:
        True if a ballot was removed.

    Raises:
        InvalidTransitionError: Outside the two day ballots.
        ForbiddenError: If the voter is the host or dead.
    """
    phase = _ballot_phase(game, voter)
    vote = _current_ballot(game, voter, phase)
    if vote is None:
        return False
    db.session.delete(vote)
    db.session.flush()
    return True


def count_votes(game: Game, phase: VotePhase) -> dict[int, int]:
    """Tally ballots of the current day per target.

    Args:
        game: The Game instance.
        phase: Which ballot to count.

    Returns:
        Mapping of target player id to number of votes.
    """
    rows = db.session.execute(
        db.select(Vote.target_player_id, db.func.count())
        .where(
            Vote.game_id == game.id,
            Vote.round == game.day_count,
            Vote.phase == phase,
        )
        .group_by(Vote.target_player_id)
    ).all()
    return {target_id: count for target_id, count in rows}


def tally_final_votes(game: Game) -> int | None:
    """Return the strict leader of today's final ballot.

    A tie for the most votes, or no votes at all, yields None: nobody is
    eliminated in that case.

    Args:
        game: The Game instance.

    Returns:
        The player id with strictly the most votes, or None.
    """
    counts = count_votes(game, VotePhase.DAY_FINAL_VOTE)
    if not counts:
        return None
    top = max(counts.values())
    leaders = [target_id for target_id, count in counts.items() if count == top]
    return leaders[0] if len(leaders) == 1 else None


def eliminate_player(game: Game, host: Player) -> dict[str, Any]:
    """Eliminate the final ballot's leader, then check for a winner.

    Without a winner the next night begins straight away.

    Args:
        game: The Game instance, in day_final_vote.
        host: The acting player; must be the host.

    Returns:
        Dict with ``eliminated_player_id``, ``was_werewolf`` and ``win_state``.

    Raises:
        ForbiddenError: If the caller is not the host.
        InvalidTransitionError: Outside day_final_vote.
        ValidationError: If there are no final votes or the top spot is tied.
    """
    assert_host(host, "eliminate a player")
    assert_phase(game, GamePhase.DAY_FINAL_VOTE)

    counts = count_votes(game, VotePhase.DAY_FINAL_VOTE)
    if not counts:
        raise ValidationError("No final votes have been cast.")
    leader_id = tally_final_votes(game)
    if leader_id is None:
        raise ValidationError("The final vote is tied; nobody can be eliminated.")

    eliminated = find_player(game, leader_id)
    eliminated.alive = False
    logger.info("game %s day %s: %s eliminated with %d votes",
                game.code, game.day_count, eliminated.name, counts[leader_id])

    win_state = evaluate_win(game)
    if win_state is None:
        start_night(game, day=game.day_count + 1)

    return {
        "eliminated_player_id": eliminated.id,
        "was_werewolf": eliminated.is_werewolf,
        "win_state": win_state.value if win_state else None,
    }


def delete_votes_involving(game: Game, player: Player) -> None:
    """Remove every ballot cast by or against a player who is leaving."""
    votes = db.session.execute(
        db.select(Vote).where(
            Vote.game_id == game.id,
            db.or_(Vote.voter_player_id == player.id, Vote.target_player_id == player.id),
        )
    ).scalars().all()
    for vote in votes:
        db.session.delete(vote)


def _ballot_phase(game: Game, voter: Player) -> VotePhase:
    assert_phase(game, GamePhase.DAY_VOTE, GamePhase.DAY_FINAL_VOTE,
                 message="Voting is only allowed during the day.")
    if voter.is_host:
        raise ForbiddenError("The host does not vote.")
    if not voter.alive:
        raise ForbiddenError("Dead players cannot vote.")
    return VotePhase(game.phase.value)


def _current_ballot(game: Game, voter: Player, phase: VotePhase) -> Vote | None:
    return db.session.execute(
        db.select(Vote).where(
            Vote.game_id == game.id,
            Vote.voter_player_id == voter.id,
            Vote.round == game.day_count,
            Vote.phase == phase,
        )
    ).scalar_one_or_none()

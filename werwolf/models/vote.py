"""Vote model — one ballot per voter, day and vote phase."""
import enum
from datetime import datetime
from sqlalchemy import Integer, DateTime, Enum, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from ..extensions import db


class VotePhase(str, enum.Enum):
    """The two daytime ballots."""

    DAY_VOTE = "day_vote"
    DAY_FINAL_VOTE = "day_final_vote"


class Vote(db.Model):
    """A ballot cast by a living player against another living player."""

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("game_id", "voter_player_id", "round", "phase", name="uq_vote_per_phase"),
        Index("idx_votes_game_round_phase", "game_id", "round", "phase"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False)
    voter_player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    target_player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=False, index=True
    )
    # Equal to Game.day_count when cast
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    phase: Mapped[VotePhase] = mapped_column(
        Enum(VotePhase, values_callable=lambda e: [v.value for v in e]),
        nullable=False,
    )
    cast_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Vote round={self.round} phase={self.phase} voter={self.voter_player_id} target={self.target_player_id}>"

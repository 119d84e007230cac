"""Game model."""
import enum
from datetime import datetime
from sqlalchemy import String, DateTime, Enum, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..extensions import db


class GamePhase(str, enum.Enum):
    """Game lifecycle phases, in play order."""

    LOBBY = "lobby"
    NIGHT_WOLF = "night_wolf"
    NIGHT_POLICE = "night_police"
    NIGHT_DOCTOR = "night_doctor"
    REVEAL = "reveal"
    DAY_VOTE = "day_vote"
    DAY_FINAL_VOTE = "day_final_vote"
    ENDED = "ended"

    @property
    def is_night(self) -> bool:
        """Return True for the three night phases."""
        return self in NIGHT_PHASES


NIGHT_PHASES = frozenset({GamePhase.NIGHT_WOLF, GamePhase.NIGHT_POLICE, GamePhase.NIGHT_DOCTOR})


class WinState(str, enum.Enum):
    """Terminal outcome of a game."""

    VILLAGERS = "villagers"
    WEREWOLVES = "werewolves"


class Game(db.Model):
    """Represents a single game session."""

    __tablename__ = "games"
    __table_args__ = (Index("idx_games_code_created", "code", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Unique per calendar day only, see game_service.create_game
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    host_client_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    phase: Mapped[GamePhase] = mapped_column(
        Enum(GamePhase, values_callable=lambda e: [v.value for v in e]),
        nullable=False,
        default=GamePhase.LOBBY,
    )
    win_state: Mapped[WinState | None] = mapped_column(
        Enum(WinState, values_callable=lambda e: [v.value for v in e]),
        nullable=True,
        default=None,
    )
    day_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    players: Mapped[list["Player"]] = relationship(  # type: ignore[name-defined]
        "Player", back_populates="game", lazy="select", order_by="Player.id"
    )
    round_state: Mapped["RoundState | None"] = relationship(  # type: ignore[name-defined]
        "RoundState", back_populates="game", uselist=False, lazy="select"
    )

    @property
    def host(self) -> "Player | None":  # type: ignore[name-defined]
        """Return the host player, if still present."""
        return next((p for p in self.players if p.is_host), None)

    @property
    def non_host_players(self) -> list["Player"]:  # type: ignore[name-defined]
        """Return every non-host player, dead or alive, in join order."""
        return [p for p in self.players if not p.is_host]

    def __repr__(self) -> str:
        return f"<Game code={self.code} phase={self.phase} day={self.day_count}>"

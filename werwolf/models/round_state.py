"""Round state model — the current night's scratch pad, one row per game."""
import enum
from sqlalchemy import Boolean, Integer, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..extensions import db


class InspectResult(str, enum.Enum):
    """What the police learn about an inspected player."""

    WEREWOLF = "werewolf"
    NOT_WEREWOLF = "not_werewolf"


class RoundState(db.Model):
    """Night actions and their resolution for the game's current day."""

    __tablename__ = "round_state"

    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), primary_key=True)
    wolf_target_player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=True
    )
    police_inspect_player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=True
    )
    police_inspect_result: Mapped[InspectResult | None] = mapped_column(
        Enum(InspectResult, values_callable=lambda e: [v.value for v in e]),
        nullable=True,
    )
    doctor_save_player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=True
    )
    resolved_death_player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id"), nullable=True
    )
    # True once the host has woken the role of the current night phase
    phase_started: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    revealed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    game: Mapped["Game"] = relationship(  # type: ignore[name-defined]
        "Game", back_populates="round_state"
    )

    def clear(self) -> None:
        """Reset every action, result and flag for a new night."""
        self.wolf_target_player_id = None
        self.police_inspect_player_id = None
        self.police_inspect_result = None
        self.doctor_save_player_id = None
        self.resolved_death_player_id = None
        self.phase_started = False
        self.revealed = False

    def forget_player(self, player_id: int) -> None:
        """Drop every reference to a player who is leaving the game."""
        for attr in (
            "wolf_target_player_id",
            "police_inspect_player_id",
            "doctor_save_player_id",
            "resolved_death_player_id",
        ):
            if getattr(self, attr) == player_id:
                setattr(self, attr, None)
        if self.police_inspect_player_id is None:
            self.police_inspect_result = None

    def __repr__(self) -> str:
        return f"<RoundState game={self.game_id} started={self.phase_started} revealed={self.revealed}>"

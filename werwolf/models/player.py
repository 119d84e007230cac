"""Player model."""
import enum
from datetime import datetime
from sqlalchemy import String, Boolean, Integer, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..extensions import db


class PlayerRole(str, enum.Enum):
    """Secret roles dealt to non-host players."""

    VILLAGER = "villager"
    WEREWOLF = "werewolf"
    DOCTOR = "doctor"
    POLICE = "police"


class Player(db.Model):
    """A participant in a game session; exactly one per game is the host."""

    __tablename__ = "players"
    __table_args__ = (UniqueConstraint("game_id", "client_id", name="uq_game_client"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # NULL for the host and for everyone until roles are assigned
    role: Mapped[PlayerRole | None] = mapped_column(
        Enum(PlayerRole, values_callable=lambda e: [v.value for v in e]),
        nullable=True,
        default=None,
    )
    alive: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_host: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    game: Mapped["Game"] = relationship(  # type: ignore[name-defined]
        "Game", foreign_keys=[game_id], back_populates="players"
    )

    @property
    def is_werewolf(self) -> bool:
        """Return True if this player holds the werewolf role."""
        return self.role == PlayerRole.WEREWOLF

    def __repr__(self) -> str:
        return f"<Player name={self.name} role={self.role} alive={self.alive}>"

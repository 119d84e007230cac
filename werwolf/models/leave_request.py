"""Leave request model."""
import enum
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from ..extensions import db


class LeaveRequestStatus(str, enum.Enum):
    """Lifecycle of a request to leave a running game."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class LeaveRequest(db.Model):
    """A non-host player's ask to leave, decided by the host."""

    __tablename__ = "leave_requests"
    __table_args__ = (UniqueConstraint("game_id", "player_id", name="uq_leave_request_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    # Set to NULL once the player has left so the approved record survives
    player_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True, index=True
    )
    player_name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[LeaveRequestStatus] = mapped_column(
        Enum(LeaveRequestStatus, values_callable=lambda e: [v.value for v in e]),
        nullable=False,
        default=LeaveRequestStatus.PENDING,
        index=True,
    )
    requested_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    processed_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<LeaveRequest player={self.player_id} status={self.status}>"

"""
Alert Settings Model for Nimbus.
Stores per-user threshold configuration.
"""
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Float, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User

DEFAULT_COST_THRESHOLD = 1000.0
DEFAULT_CPU_THRESHOLD = 80.0
DEFAULT_MEMORY_THRESHOLD = 80.0
DEFAULT_STORAGE_THRESHOLD = 90.0


class AlertSettings(TimestampMixin, Base):
    """Per-user alert thresholds. One row per user, created lazily with defaults."""

    __tablename__ = "alert_settings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,  # One settings record per user
        nullable=False,
    )

    # Incremented on every update so readers can tell which revision they evaluated
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    cost_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_COST_THRESHOLD)
    cpu_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_CPU_THRESHOLD)
    memory_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_MEMORY_THRESHOLD)
    storage_threshold: Mapped[float] = mapped_column(Float, default=DEFAULT_STORAGE_THRESHOLD)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    user: Mapped["User"] = relationship(back_populates="alert_settings")

    def __repr__(self) -> str:
        return f"<AlertSettings user={self.user_id} v{self.version}>"

from datetime import datetime
from uuid import UUID, uuid4
from sqlalchemy import Boolean, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.shared.db.base import Base, TimestampMixin
from app.shared.core.constants import AlertSeverity


class Alert(TimestampMixin, Base):
    """
    A triggered alert owned by a user.

    Mutated only to flip `resolved` and stamp `resolved_at`; the two always
    move together.
    """
    __tablename__ = "alerts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    provider: Mapped[str] = mapped_column(String(20))
    alert_type: Mapped[str] = mapped_column(String(20))  # cost, cpu, memory, storage, performance, health
    threshold: Mapped[float] = mapped_column(Float)
    current_value: Mapped[float] = mapped_column(Float)
    message: Mapped[str] = mapped_column(Text)
    severity: Mapped[str] = mapped_column(String(10), default=AlertSeverity.MEDIUM.value)

    triggered: Mapped[bool] = mapped_column(Boolean, default=True)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    resolved_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Alert {self.alert_type}@{self.provider} severity={self.severity} resolved={self.resolved}>"


Index("ix_alerts_user_created", Alert.user_id, Alert.created_at.desc())

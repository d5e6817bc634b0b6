import uuid
from datetime import datetime
from sqlalchemy import Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.shared.db.base import Base, utcnow


class MetricSample(Base):
    """
    One timestamped observation of a metric for a provider.
    Append-only: rows are inserted or bulk-deleted per user, never updated.
    """
    __tablename__ = "metric_samples"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    provider: Mapped[str] = mapped_column(String(20), index=True)  # aws, gcp, azure, digitalocean
    metric_type: Mapped[str] = mapped_column(String(20))          # billing, cpu, memory, ...
    value: Mapped[float] = mapped_column(Float)
    unit: Mapped[str] = mapped_column(String(20))

    resource_id: Mapped[str] = mapped_column(String(255), default="")
    resource_name: Mapped[str] = mapped_column(String(255), default="")

    timestamp: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<MetricSample {self.provider}/{self.metric_type}={self.value}{self.unit} @ {self.timestamp}>"


# Every read is scoped by user first and usually wants the newest sample per group
Index(
    "ix_metric_samples_lookup",
    MetricSample.user_id,
    MetricSample.provider,
    MetricSample.metric_type,
    MetricSample.timestamp.desc(),
)

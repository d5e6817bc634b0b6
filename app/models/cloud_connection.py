from uuid import UUID, uuid4
from typing import TYPE_CHECKING
from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy_utils import StringEncryptedType
from sqlalchemy_utils.types.encrypted.encrypted_type import AesEngine

from app.shared.db.base import Base, TimestampMixin
from app.shared.core.security import get_encryption_key

if TYPE_CHECKING:
    from app.models.user import User


class CloudConnection(TimestampMixin, Base):
    """
    Stored credentials for one provider of one user.

    The credential payload is the JSON dump of a provider-specific schema
    (see app.schemas.connections) and is encrypted at rest.
    """
    __tablename__ = "cloud_connections"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_cloud_connections_user_provider"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(20))  # 'aws', 'gcp', 'azure', 'digitalocean'
    connected: Mapped[bool] = mapped_column(Boolean, default=True)
    credentials_encrypted: Mapped[str] = mapped_column(
        StringEncryptedType(Text, get_encryption_key, AesEngine, "pkcs5")
    )

    user: Mapped["User"] = relationship(back_populates="cloud_connections")

    def __repr__(self) -> str:
        return f"<CloudConnection {self.provider} user={self.user_id} connected={self.connected}>"

from uuid import UUID, uuid4
from typing import Any, List, Optional, TYPE_CHECKING
from sqlalchemy import String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.db.base import Base, TimestampMixin
from app.shared.core.constants import Theme
from app.shared.core.security import hash_password, verify_password

if TYPE_CHECKING:
    from app.models.alert_settings import AlertSettings
    from app.models.cloud_connection import CloudConnection


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(120))
    # Stored normalized (trimmed, lower-case) so uniqueness is case-insensitive
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(128))
    theme: Mapped[str] = mapped_column(String(10), default=Theme.LIGHT.value)

    alert_settings: Mapped[Optional["AlertSettings"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    cloud_connections: Mapped[List["CloudConnection"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def set_password(self, plain: str) -> bool:
        """
        Hash and store a new password.
        Returns False (and keeps the stored hash) when the plaintext is unchanged.
        """
        if self.password_hash and verify_password(plain, self.password_hash):
            return False
        self.password_hash = hash_password(plain)
        return True

    def check_password(self, plain: str) -> bool:
        return verify_password(plain, self.password_hash)

    def __repr__(self) -> str:
        return f"<User {self.id}>"


def normalize_email(value: str | None) -> str | None:
    return value.strip().lower() if isinstance(value, str) else value


@event.listens_for(User.email, "set", retval=True)
def on_user_email_set(_target: User, value: str, _old: str, _init: Any) -> str:
    return normalize_email(value)

"""
User accounts: signup, login, profile, password and statistics.
"""
from typing import Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, normalize_email
from app.modules.accounts.domain.connections import ConnectionService
from app.modules.monitoring.domain.alert_ledger import AlertLedger
from app.modules.monitoring.domain.sample_store import SampleStore
from app.schemas.users import UserStats
from app.shared.core.config import get_settings
from app.shared.core.constants import Theme
from app.shared.core.exceptions import AuthError, ConflictError, ResourceNotFoundError, ValidationError
from app.shared.core.logging import audit_log
from app.shared.core.security import create_access_token

logger = structlog.get_logger()

EMAIL_TAKEN_MESSAGE = "Email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _check_password_length(self, password: str, field: str = "Password") -> None:
        minimum = get_settings().PASSWORD_MIN_LENGTH
        if len(password) < minimum:
            raise ValidationError(f"{field} must be at least {minimum} characters long")

    async def _email_taken(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        stmt = select(func.count(User.id)).where(User.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def get(self, user_id: UUID) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User not found")
        return user

    async def signup(self, name: str, email: str, password: str) -> Tuple[User, str]:
        """Create an account and issue its first session token."""
        self._check_password_length(password)
        if await self._email_taken(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE)

        user = User(name=name.strip(), email=email, theme=Theme.LIGHT.value)
        user.set_password(password)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same address
            await self.db.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        await self.db.refresh(user)

        audit_log("user_signed_up", str(user.id))
        return user, create_access_token(user.id)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        user = result.scalar_one_or_none()
        if user is None or not user.check_password(password):
            logger.warning("login_failed")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        audit_log("user_logged_in", str(user.id))
        return user, create_access_token(user.id)

    async def update_profile(
        self,
        user_id: UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        user = await self.get(user_id)
        if name:
            user.name = name.strip()
        if email and normalize_email(email) != user.email:
            if await self._email_taken(email, exclude_id=user_id):
                raise ConflictError(EMAIL_TAKEN_MESSAGE)
            user.email = email
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        await self.db.refresh(user)
        logger.info("profile_updated", user_id=str(user_id))
        return user

    async def change_password(
        self,
        user_id: UUID,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> bool:
        """
        Replace the password after verifying the current one.
        Returns whether the stored hash actually changed.
        """
        if not current_password or not new_password:
            raise ValidationError("Please provide current and new password")
        self._check_password_length(new_password, field="New password")

        user = await self.get(user_id)
        if not user.check_password(current_password):
            raise AuthError("Current password is incorrect")

        changed = user.set_password(new_password)
        if changed:
            await self.db.commit()
            audit_log("password_changed", str(user_id))
        return changed

    async def set_theme(self, user_id: UUID, theme: Theme) -> User:
        user = await self.get(user_id)
        user.theme = Theme(theme).value
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def stats(self, user_id: UUID) -> UserStats:
        ledger = AlertLedger(self.db)
        connected = await ConnectionService(self.db).connected_providers(user_id)
        return UserStats(
            metrics_count=await SampleStore(self.db).count(user_id),
            alerts_count=await ledger.count(user_id),
            unresolved_alerts_count=await ledger.count(user_id, resolved=False),
            connected_providers_count=len(connected),
            connected_providers=connected,
        )

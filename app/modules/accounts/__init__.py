from .domain.users import UserService
from .domain.settings import AlertSettingsService
from .domain.connections import ConnectionService

__all__ = ["UserService", "AlertSettingsService", "ConnectionService"]

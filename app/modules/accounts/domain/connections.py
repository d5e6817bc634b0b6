"""
Cloud Connection Service

Stores per-provider credentials. Credentials are validated against the
provider's schema before persistence, encrypted at rest, and never returned.
They are not used to call any provider.
"""
import json
from typing import List
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.cloud_connection import CloudConnection
from app.schemas.connections import ConnectionResponse, credentials_adapter
from app.shared.core.constants import CloudProvider
from app.shared.core.exceptions import ResourceNotFoundError, ValidationError
from app.shared.core.logging import audit_log

logger = structlog.get_logger()


def parse_credentials(provider: str, payload: dict):
    """Validate a raw payload as the credential variant for `provider`."""
    try:
        provider_value = CloudProvider(provider).value
    except ValueError:
        raise ValidationError(f"Unsupported provider: {provider}")

    body = dict(payload or {})
    declared = body.get("provider")
    if declared is not None and declared != provider_value:
        raise ValidationError("Credential provider does not match the requested provider")
    body["provider"] = provider_value

    try:
        return credentials_adapter.validate_python(body)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]) for err in e.errors()})
        raise ValidationError(
            f"Invalid {provider_value} credentials",
            details={"fields": fields},
        )


class ConnectionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, user_id: UUID, provider: str) -> CloudConnection | None:
        result = await self.db.execute(
            select(CloudConnection).where(
                CloudConnection.user_id == user_id,
                CloudConnection.provider == provider,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def to_response(connection: CloudConnection) -> ConnectionResponse:
        credentials = credentials_adapter.validate_python(json.loads(connection.credentials_encrypted))
        return ConnectionResponse(
            provider=connection.provider,
            connected=connection.connected,
            fields=credentials.public_fields(),
            secrets_stored=credentials.stored_secrets(),
            updated_at=connection.updated_at,
        )

    async def upsert(self, user_id: UUID, provider: str, payload: dict) -> ConnectionResponse:
        credentials = parse_credentials(provider, payload)
        connection = await self._get(user_id, credentials.provider)
        blob = credentials.model_dump_json()

        if connection is None:
            connection = CloudConnection(
                user_id=user_id,
                provider=credentials.provider,
                connected=True,
                credentials_encrypted=blob,
            )
            self.db.add(connection)
        else:
            connection.credentials_encrypted = blob
            connection.connected = True

        await self.db.commit()
        await self.db.refresh(connection)

        audit_log("cloud_credentials_saved", str(user_id), {"provider": credentials.provider})
        return self.to_response(connection)

    async def list(self, user_id: UUID) -> List[ConnectionResponse]:
        result = await self.db.execute(
            select(CloudConnection)
            .where(CloudConnection.user_id == user_id)
            .order_by(CloudConnection.provider)
        )
        return [self.to_response(c) for c in result.scalars().all()]

    async def disconnect(self, user_id: UUID, provider: str) -> None:
        """Forget stored credentials for one provider."""
        connection = await self._get(user_id, provider)
        if connection is None:
            raise ResourceNotFoundError("Connection not found")
        await self.db.delete(connection)
        await self.db.commit()
        audit_log("cloud_credentials_removed", str(user_id), {"provider": provider})

    async def connected_providers(self, user_id: UUID) -> List[str]:
        result = await self.db.execute(
            select(CloudConnection.provider)
            .where(CloudConnection.user_id == user_id, CloudConnection.connected.is_(True))
            .order_by(CloudConnection.provider)
        )
        return list(result.scalars().all())

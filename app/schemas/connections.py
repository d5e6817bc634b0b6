"""
Per-provider credential schemas.

Each provider carries its own required-field set; the union is discriminated
on `provider` and validated before anything is persisted.
"""
from typing import Annotated, ClassVar, Dict, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from app.schemas.common import UTCDatetime


class _ProviderCredentials(BaseModel):
    # Field names that must never be returned on reads
    secret_fields: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    def public_fields(self) -> Dict[str, str]:
        return {
            k: v for k, v in self.model_dump(exclude={"provider"}).items()
            if k not in self.secret_fields
        }

    def stored_secrets(self) -> List[str]:
        """Names of secret fields that hold a non-empty value."""
        return sorted(k for k in self.secret_fields if getattr(self, k, None))


class AWSCredentials(_ProviderCredentials):
    """AWS access key pair."""
    secret_fields: ClassVar[frozenset[str]] = frozenset({"secret_access_key"})

    provider: Literal["aws"] = "aws"
    access_key_id: str = Field(..., min_length=16, max_length=128, pattern=r"^[A-Z0-9]+$")
    secret_access_key: str = Field(..., min_length=16, max_length=256)
    region: str = Field(default="us-east-1", pattern=r"^[a-z]{2}(-[a-z]+)+-\d$")


class GCPCredentials(_ProviderCredentials):
    """GCP service account."""
    secret_fields: ClassVar[frozenset[str]] = frozenset({"service_account_key"})

    provider: Literal["gcp"] = "gcp"
    project_id: str = Field(..., min_length=6, max_length=30, pattern=r"^[a-z][a-z0-9-]+$")
    service_account_key: str = Field(..., min_length=1, description="Full JSON key content")


class AzureCredentials(_ProviderCredentials):
    """Azure service principal."""
    secret_fields: ClassVar[frozenset[str]] = frozenset({"client_secret"})

    provider: Literal["azure"] = "azure"
    subscription_id: str = Field(..., min_length=1, max_length=64)
    tenant_id: str = Field(..., min_length=1, max_length=64, description="Azure Directory ID")
    client_id: str = Field(..., min_length=1, max_length=64)
    client_secret: str = Field(..., min_length=1, max_length=256)


class DigitalOceanCredentials(_ProviderCredentials):
    """DigitalOcean personal access token."""
    secret_fields: ClassVar[frozenset[str]] = frozenset({"api_token"})

    provider: Literal["digitalocean"] = "digitalocean"
    api_token: str = Field(..., min_length=1, max_length=256)


ProviderCredentials = Annotated[
    Union[AWSCredentials, GCPCredentials, AzureCredentials, DigitalOceanCredentials],
    Field(discriminator="provider"),
]

credentials_adapter: TypeAdapter[ProviderCredentials] = TypeAdapter(ProviderCredentials)


class ConnectionResponse(BaseModel):
    """Read view of a stored connection. Secrets are reduced to the names of those on file."""
    provider: str
    connected: bool
    fields: Dict[str, str]
    secrets_stored: List[str]
    updated_at: UTCDatetime | None = None

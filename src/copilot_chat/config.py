"""
Agent configuration and validation.
"""

import os
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

GUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

ENV_VARS = {
    "client_id": "COPILOT_CLIENT_ID",
    "tenant_id": "COPILOT_TENANT_ID",
    "bot_identifier": "COPILOT_BOT_IDENTIFIER",
    "environment_id": "COPILOT_ENVIRONMENT_ID",
}


def is_valid_guid(value: str) -> bool:
    return bool(GUID_PATTERN.fullmatch(value))


class AgentConfig(BaseModel):
    """Identifies the target agent and tenant. Frozen: build a new client on change."""

    client_id: str = Field("", alias="clientId")
    tenant_id: str = Field("", alias="tenantId")
    bot_identifier: str = Field("", alias="botIdentifier")
    environment_id: str = Field("", alias="environmentId")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        env = os.environ if environ is None else environ
        return cls(**{field: env.get(var, "") for field, var in ENV_VARS.items()})


class ConfigValidation(BaseModel):
    is_valid: bool = Field(alias="isValid")
    errors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


def validate_config(config: AgentConfig) -> ConfigValidation:
    """Report one error per empty field, then a format error per non-GUID id."""
    errors: list[str] = []

    if not config.client_id:
        errors.append("Client ID is required")
    if not config.tenant_id:
        errors.append("Tenant ID is required")
    if not config.bot_identifier:
        errors.append("Bot Identifier is required")
    if not config.environment_id:
        errors.append("Environment ID is required")

    if config.client_id and not is_valid_guid(config.client_id):
        errors.append("Client ID must be a valid GUID")
    if config.tenant_id and not is_valid_guid(config.tenant_id):
        errors.append("Tenant ID must be a valid GUID")

    return ConfigValidation(is_valid=not errors, errors=errors)

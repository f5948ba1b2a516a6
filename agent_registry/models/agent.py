"""
Agent models for registration input and stored records.

Field names are snake_case in Python and camelCase on the wire
(``agentId``, ``updatedAt``), matching the registry's JSON API.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentStatus(str, Enum):
    """Operational status an agent advertises."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class GeoPoint(BaseModel):
    """Latitude/longitude pair in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lon: float = Field(..., ge=-180, le=180, description="Longitude")


class AgentLocation(CamelModel):
    """Optional physical placement of an agent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    coordinates: GeoPoint = Field(..., description="Geographic point of the agent")
    city: Optional[str] = Field(None, description="City label")
    country: Optional[str] = Field(None, description="Country label")


class AgentRegistration(CamelModel):
    """Request model for registering (or re-registering) an agent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    agent_id: str = Field(..., min_length=1, description="Unique, immutable agent identifier")
    name: str = Field(..., min_length=1, description="Display name, searchable")
    description: str = Field(..., min_length=1, description="Free text description, searchable")
    url: str = Field(..., description="Base URL where the agent card and API are served")
    tags: List[str] = Field(default_factory=list, description="Exact-match tags used for filtering and facets")
    status: AgentStatus = Field(AgentStatus.ACTIVE, description="Operational status")
    version: str = Field("1.0.0", min_length=1, description="Free-form version string")
    capabilities: str = Field("", description="Free text capability summary, searchable")
    location: Optional[AgentLocation] = Field(None, description="Optional geographic placement")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be a valid http or https URI")
        return value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: List[str]) -> List[str]:
        if any(not tag for tag in value):
            raise ValueError("tags must be non-empty strings")
        return value


class AgentRecord(AgentRegistration):
    """An agent as stored in the document index."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    updated_at: datetime = Field(..., description="Set by the registry on every write")

    def to_response(self) -> Dict[str, Any]:
        """Serialize for API responses (camelCase, no null optionals)."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

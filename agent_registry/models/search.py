"""
Search request and pagination models.
"""

import math
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .agent import AgentStatus, CamelModel


class SortMode(str, Enum):
    """Requested ordering of search hits."""

    RELEVANCE = "relevance"
    NAME = "name"
    UPDATED_AT = "updatedAt"
    DISTANCE = "distance"


class SearchRequest(CamelModel):
    """Discovery request: free text, filters, optional geo point, sort and page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    text: Optional[str] = Field(None, alias="q", description="Free text matched against name, description and capabilities")
    tags: Optional[str] = Field(None, description="Comma separated tags; matches agents carrying any of them")
    status: Optional[AgentStatus] = Field(None, description="Exact status filter")
    version: Optional[str] = Field(None, description="Exact version filter")
    city: Optional[str] = Field(None, description="Exact city filter")
    country: Optional[str] = Field(None, description="Exact country filter")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude of the reference point")
    lon: Optional[float] = Field(None, ge=-180, le=180, description="Longitude of the reference point")
    page: int = Field(1, ge=1, description="1-based page number")
    per_page: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Hits per page")
    sort: SortMode = Field(SortMode.RELEVANCE, description="Ordering of hits")

    @field_validator("text", "tags", "version", "city", "country")
    @classmethod
    def _blank_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def tag_list(self) -> List[str]:
        """Tags split on commas, trimmed, empties dropped."""
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]

    @property
    def has_geo_point(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class Pagination(CamelModel):
    """Pagination envelope returned with every listing."""

    page: int
    per_page: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Pagination":
        return cls(
            page=page,
            per_page=per_page,
            total=total,
            total_pages=math.ceil(total / per_page) if per_page else 0,
        )

"""
Query compiler: discovery request -> structured search engine query.

compile_search() is pure. It never talks to the store; the Document Store
Adapter executes what it returns.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models import SearchRequest, SortMode

# Text fields matched by free-text search; name counts double
TEXT_FIELDS = ["name^2", "description", "capabilities"]

GEO_FIELD = "location.coordinates"
DISTANCE_UNIT = "km"

FACET_FIELDS = ("tags", "status")

UPDATED_AT_DESC = {"updatedAt": {"order": "desc"}}
NAME_ASC = {"name.keyword": {"order": "asc"}}


@dataclass
class CompiledQuery:
    """A search ready to hand to the document store."""

    query: Dict[str, Any]
    sort: List[Dict[str, Any]] = field(default_factory=list)
    aggs: Dict[str, Any] = field(default_factory=dict)
    offset: int = 0
    limit: int = 20
    track_scores: bool = False
    geo_sorted: bool = False

    def to_search_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``Elasticsearch.search``."""
        kwargs: Dict[str, Any] = {
            "query": self.query,
            "from_": self.offset,
            "size": self.limit,
            "track_total_hits": True,
        }
        if self.sort:
            kwargs["sort"] = self.sort
        if self.aggs:
            kwargs["aggs"] = self.aggs
        if self.track_scores:
            kwargs["track_scores"] = True
        return kwargs


def _text_clause(text: str) -> Dict[str, Any]:
    return {
        "multi_match": {
            "query": text,
            "fields": TEXT_FIELDS,
            "fuzziness": "AUTO",
            "type": "best_fields",
        }
    }


def _filter_clauses(request: SearchRequest) -> List[Dict[str, Any]]:
    filters: List[Dict[str, Any]] = []

    tags = request.tag_list
    if tags:
        filters.append({"terms": {"tags": tags}})
    if request.status is not None:
        filters.append({"term": {"status": request.status.value}})
    if request.version:
        filters.append({"term": {"version": request.version}})
    if request.city:
        filters.append({"term": {"location.city": request.city}})
    if request.country:
        filters.append({"term": {"location.country": request.country}})

    return filters


def _sort_clauses(request: SearchRequest) -> List[Dict[str, Any]]:
    # A reference point always wins over the requested sort
    if request.has_geo_point:
        return [{
            "_geo_distance": {
                GEO_FIELD: {"lat": request.lat, "lon": request.lon},
                "order": "asc",
                "unit": DISTANCE_UNIT,
            }
        }]

    if request.sort == SortMode.NAME:
        return [NAME_ASC]
    if request.sort == SortMode.UPDATED_AT:
        return [UPDATED_AT_DESC]

    # relevance (and distance without a point): natural ranking needs text
    if request.text:
        return []
    return [UPDATED_AT_DESC]


def facet_aggregations() -> Dict[str, Any]:
    """Term-count aggregations requested with every search."""
    return {name: {"terms": {"field": name}} for name in FACET_FIELDS}


def compile_search(request: SearchRequest) -> CompiledQuery:
    """
    Translate a validated discovery request into a structured query.

    Args:
        request: Validated search request

    Returns:
        CompiledQuery with bool query, sort, aggregations and paging
    """
    must: List[Dict[str, Any]] = []
    if request.text:
        must.append(_text_clause(request.text))

    query = {
        "bool": {
            "must": must,
            "filter": _filter_clauses(request),
        }
    }

    return CompiledQuery(
        query=query,
        sort=_sort_clauses(request),
        aggs=facet_aggregations(),
        offset=request.offset,
        limit=request.per_page,
        track_scores=bool(request.text),
        geo_sorted=request.has_geo_point,
    )


def compile_listing(page: int, per_page: int) -> CompiledQuery:
    """Unfiltered listing, newest first."""
    return CompiledQuery(
        query={"match_all": {}},
        sort=[UPDATED_AT_DESC],
        offset=(page - 1) * per_page,
        limit=per_page,
    )


def extract_distance(sort_values: Optional[List[Any]], geo_sorted: bool) -> Optional[float]:
    """Distance in kilometers from a geo-sorted hit's sort values."""
    if not geo_sorted or not sort_values:
        return None
    value = sort_values[0]
    # Documents without a location sort last with an infinite distance
    if isinstance(value, (int, float)) and not math.isinf(value):
        return float(value)
    return None

from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

Source: TypeAlias = Literal["agent", "cache", "web-search"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Classification(BaseModel):
    """Outcome of classifying a user query"""

    valid: bool = Field(description="Whether the query can be answered by a web search")
    reason: str | None = Field(
        default=None, description="Why the query was rejected, or a diagnostic note"
    )


class QueryRecord(BaseModel):
    """A resolved query persisted for later similarity lookups"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str = Field(description="Original query text")
    embedding: list[float] | None = Field(
        default=None, description="Embedding of the query text"
    )
    answer: str = Field(alias="results", description="Summarized answer")
    timestamp: datetime = Field(default_factory=utc_now)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class QueryRequest(BaseModel):
    """Request body accepted by the query endpoint"""

    query: str | None = None

    @field_validator("query", mode="before")
    @classmethod
    def coerce_query(cls, value: Any) -> str | None:
        # Numbers are read as text; other non-string values count as missing.
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return value if isinstance(value, str) else None


class QueryResponse(BaseModel):
    """Answer returned to the caller together with where it came from"""

    answer: str
    source: Source
    original_query: str | None = Field(
        default=None, description="Stored query that matched, for cache hits"
    )

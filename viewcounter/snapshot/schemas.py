"""Pydantic models for persisted snapshots.

Field names on the wire are the aliases (``PageCounts``, ``UniqueViews``,
``IPs``) so records written by earlier deployments keep decoding. Unknown
fields are ignored, which lets newer writers add fields without breaking
older readers.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_serializer, field_validator


class PageSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    page_counts: Dict[str, NonNegativeInt] = Field(default_factory=dict, alias="PageCounts")
    unique_views: NonNegativeInt = Field(default=0, alias="UniqueViews")

    @field_validator("page_counts", mode="before")
    @classmethod
    def _null_counts(cls, value: Any) -> Any:
        # an empty map may have been written as null
        return {} if value is None else value


class VisitorSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    visitors: FrozenSet[str] = Field(default_factory=frozenset, alias="IPs")

    @field_validator("visitors", mode="before")
    @classmethod
    def _accept_set_encodings(cls, value: Any) -> Any:
        """Accept ``{ip: true}`` objects (stored format), lists, or null."""
        if value is None:
            return frozenset()
        if isinstance(value, dict):
            return frozenset(value.keys())
        return value

    @field_serializer("visitors")
    def _visitors_as_object(self, visitors: FrozenSet[str]) -> Dict[str, bool]:
        return {ip: True for ip in self.sorted_visitors()}

    def sorted_visitors(self) -> List[str]:
        return sorted(self.visitors)


__all__ = ["PageSnapshot", "VisitorSnapshot"]

"""
Feature models for featuredocs.

This module defines the catalog record, the resolved graph node and the
documentation values handed to editor tooling.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class CacheKey(NamedTuple):
    """Identifies one resolved feature graph."""

    version: str
    runtime_type: str

    def __str__(self) -> str:
        return f"{self.version}/{self.runtime_type}"


class Feature(BaseModel):
    """A feature record as loaded from a catalog snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(description="Symbolic short name, e.g. servlet-4.0")
    display_name: str = Field(default="", alias="displayName")
    short_description: str = Field(default="", alias="shortDescription")
    versions: frozenset[str] = Field(default_factory=frozenset, alias="appliesTo")
    runtime_types: frozenset[str] = Field(default_factory=frozenset, alias="runtimeTypes")
    enables: tuple[str, ...] = ()

    def applies_to(self, version: str | None = None, runtime_type: str | None = None) -> bool:
        """Check whether this record applies to a version/runtime (empty sets apply to all)."""
        if version and self.versions and version not in self.versions:
            return False
        if runtime_type and self.runtime_types and runtime_type not in self.runtime_types:
            return False
        return True


@dataclass(frozen=True)
class FeatureListNode:
    """One feature in a resolved graph together with its direct relationships."""

    feature: Feature
    enabled_by: frozenset[str] = field(default_factory=frozenset)
    enables_features: frozenset[str] = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        return self.feature.name

    @property
    def description(self) -> str:
        return self.feature.short_description


class FeatureDescription(BaseModel):
    """Documentation for a feature as served to editor tooling."""

    model_config = ConfigDict(frozen=True)

    name: str
    short_description: str
    enabled_by: tuple[str, ...] = ()
    enables_features: tuple[str, ...] = ()

    @property
    def enabled_by_text(self) -> str:
        return ", ".join(self.enabled_by)

    @property
    def enables_text(self) -> str:
        return ", ".join(self.enables_features)

    def to_hover_text(self) -> str:
        """Render as plain hover text; relationship lines are omitted when empty."""
        lines = [f"Description: {self.short_description}"]
        if self.enabled_by:
            lines.append(f"Enabled by: {self.enabled_by_text}")
        if self.enables_features:
            lines.append(f"Enables: {self.enables_text}")
        return "\n".join(lines)


class CompletionEntry(BaseModel):
    """A plain completion-style entry for one feature."""

    model_config = ConfigDict(frozen=True)

    label: str
    documentation: str = ""

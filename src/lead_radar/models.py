"""Pydantic models for Lead Radar data structures."""

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class ConditionKind(str, Enum):
    """Enumeration of the comparisons a scoring rule can apply."""

    LESS_THAN = "lessThan"
    GREATER_THAN = "greaterThan"
    INCLUDES = "includes"
    REGEX = "regex"
    EQUALS = "equals"

    @classmethod
    def parse(cls, value: str) -> Optional["ConditionKind"]:
        """Return the matching kind, or None for an unsupported condition."""
        try:
            return cls(value)
        except ValueError:
            return None


class Rule(BaseModel):
    """A declarative scoring rule read from the scoring schema."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., min_length=1, description="Lead attribute to read")
    condition: str = Field(..., description="Comparison applied to the attribute")
    value: Any = Field(..., description="Comparison operand")
    points: int = Field(..., description="Score contribution when the rule matches")
    reason: str = Field(..., description="Human-readable explanation of the match")

    _pattern: Optional[re.Pattern] = PrivateAttr(default=None)

    @model_validator(mode="after")
    def compile_pattern(self) -> "Rule":
        """Compile regex rules up front so a bad pattern fails at load time."""
        if self.kind is ConditionKind.REGEX:
            try:
                self._pattern = re.compile(str(self.value), re.IGNORECASE)
            except re.error as e:
                raise ValueError(
                    f"invalid regex pattern {self.value!r} for field {self.field!r}: {e}"
                ) from e
        return self

    @property
    def kind(self) -> Optional[ConditionKind]:
        """The parsed condition kind, None when unsupported."""
        return ConditionKind.parse(self.condition)

    @property
    def pattern(self) -> Optional[re.Pattern]:
        """Compiled case-insensitive pattern for regex rules."""
        return self._pattern


class ScoringSchema(BaseModel):
    """An ordered, versioned list of scoring rules."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(default="1", description="Schema version label")
    rules: List[Rule] = Field(default_factory=list, description="Rules in evaluation order")

    def unknown_conditions(self) -> List[str]:
        """List the condition strings that no evaluator supports."""
        return [rule.condition for rule in self.rules if rule.kind is None]


class ScoreResult(BaseModel):
    """Outcome of evaluating a lead against the scoring rules."""

    score: int = Field(default=0, description="Sum of points from matching rules")
    reasons: List[str] = Field(
        default_factory=list, description="Reasons of matching rules, in rule order"
    )


class ScoredLead(BaseModel):
    """A lead paired with its rule-based score."""

    lead: Dict[str, Any] = Field(..., description="The (possibly enriched) lead record")
    score: int = Field(default=0, description="Rule-based score")
    reasons: List[str] = Field(default_factory=list, description="Matched rule reasons")

    @property
    def name(self) -> str:
        """Business name of the lead, if present."""
        return str(self.lead.get("name", ""))


class LeadRecord(BaseModel):
    """Typed constructor for lead records.

    Leads travel through scoring and enrichment as plain dicts; this model is
    used where a lead is built from an external source so the semantic fields
    are checked once.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Business name")
    address: Optional[str] = Field(default=None, description="Formatted address")
    phone: Optional[str] = Field(default=None, description="Phone number")
    website_uri: Optional[str] = Field(
        default=None, alias="websiteUri", description="Business website"
    )
    employees: int = Field(default=0, ge=0, description="Headcount estimate")
    founded_year: Optional[int] = Field(
        default=None, alias="foundedYear", description="Calendar year founded"
    )
    industry: str = Field(default="", description="Free-text industry")
    careers_page_text: str = Field(default="", alias="careersPageText")
    just_moved: bool = Field(default=False, alias="justMoved")
    hiring_spike: bool = Field(default=False, alias="hiringSpike")
    reviews: List[str] = Field(default_factory=list)

    def to_lead(self) -> Dict[str, Any]:
        """Return the lead as a camelCase dict, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)

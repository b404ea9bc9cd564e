"""Pydantic schemas for canonical lookup records and the result envelope.

Every orchestrator operation returns a ``LookupResult``. Records are frozen
once constructed by the normalizer or the fallback knowledge base.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class ProviderKind(str, Enum):
    """External data sources fronted by the orchestrator."""

    DIAGNOSIS = "diagnosis"
    PROCEDURE = "procedure"
    TERMINOLOGY = "terminology"
    HCPCS = "hcpcs"
    DRUG = "drug"
    LAB = "lab"
    REGISTRY = "registry"


class DiagnosisCode(BaseModel):
    """One ICD-10-style diagnosis code entry."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    category: str
    valid_from: str
    valid_to: str | None = None
    is_header: bool = False
    short_description: str | None = None


class ProcedureCode(BaseModel):
    """One CPT-style (or HCPCS Level II) procedure code entry.

    Attributes:
        relative_value_units: RVU weight, when known.
        modifiers: Applicable modifier codes, in billing order.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    category: str
    relative_value_units: float | None = None
    modifiers: list[str] | None = None
    valid_from: str
    valid_to: str | None = None


class TerminologyEntry(BaseModel):
    """A clinical term or abbreviation with its definition."""

    model_config = ConfigDict(frozen=True)

    term: str
    definition: str
    category: str
    synonyms: frozenset[str] | None = None
    related_terms: frozenset[str] | None = None


class ProviderAddress(BaseModel):
    """A practice or mailing address from the provider registry."""

    model_config = ConfigDict(frozen=True)

    line1: str
    line2: str | None = None
    city: str
    state: str
    zip: str
    phone: str | None = None
    fax: str | None = None


class ProviderRecord(BaseModel):
    """A national provider registry record in canonical form.

    Attributes:
        identifier: National Provider Identifier (NPI).
        display_name: Organization name, or the individual's full name.
        specialty: Description of the first taxonomy, or "Unknown".
        primary_address_text: Comma-joined first address, or
            "Address not available".
        primary_phone: Telephone of the first address, or empty string.
        taxonomies: Taxonomy descriptions in registry order.
        addresses: All addresses in registry order.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    display_name: str
    specialty: str
    primary_address_text: str
    primary_phone: str
    organization_name: str | None = None
    individual_name: str | None = None
    taxonomies: list[str] = Field(default_factory=list)
    addresses: list[ProviderAddress] = Field(default_factory=list)


class LookupResult(BaseModel, Generic[T]):
    """Uniform envelope returned by every orchestrator operation.

    A failed result never carries a value. ``served_from_cache`` is set only
    when the value was read from the cache store.
    """

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    value: T | None = None
    error_message: str | None = None
    served_from_cache: bool = False

    @model_validator(mode="after")
    def _failure_has_no_value(self) -> "LookupResult[T]":
        if not self.succeeded and self.value is not None:
            raise ValueError("a failed lookup result cannot carry a value")
        if not self.succeeded and self.served_from_cache:
            raise ValueError("a failed lookup result cannot be served from cache")
        return self

    @classmethod
    def success(
        cls,
        value: Any,
        *,
        served_from_cache: bool = False,
        error_message: str | None = None,
    ) -> "LookupResult[Any]":
        """Build a successful result, optionally flagged as degraded."""
        return cls(
            succeeded=True,
            value=value,
            error_message=error_message,
            served_from_cache=served_from_cache,
        )

    @classmethod
    def failure(cls, error_message: str) -> "LookupResult[Any]":
        """Build a failed result with no value."""
        return cls(succeeded=False, error_message=error_message)


class CacheStats(BaseModel):
    """Cache observability snapshot."""

    size: int
    keys: list[str]

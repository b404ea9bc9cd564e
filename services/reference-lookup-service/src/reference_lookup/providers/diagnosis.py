"""Diagnosis-code (ICD-10) search client.

GET ``<base_url>?q=<query>``; the provider answers with a JSON array of
objects carrying ``code``, ``description``, ``category``, ``validFrom``,
optional ``validTo``, ``isHeader`` and ``shortDescription``.
"""

from __future__ import annotations

from typing import Any

from reference_lookup.providers.base import HttpProviderClient, ParseError
from reference_lookup.schemas import ProviderKind


class DiagnosisCodeClient(HttpProviderClient):
    """Live client for the diagnosis-code search endpoint."""

    kind = ProviderKind.DIAGNOSIS

    def _params(self, query: str) -> dict[str, str]:
        return {"q": query}

    def _check_shape(self, data: Any) -> list[Any]:
        if not isinstance(data, list):
            raise ParseError(
                message=(
                    "diagnosis provider returned "
                    f"{type(data).__name__}, expected a JSON array"
                )
            )
        return data

"""National Provider Identifier (NPI) registry client.

GET ``<base_url>?version=<v>&number=<npi>``. The registry answers with
``{"result_count": n, "results": [...]}``; each result carries ``number``,
``basic`` name fields, ``taxonomies`` and ``addresses``. Invalid requests
come back as ``{"Errors": [...]}`` with a 200 status.

API documentation: https://npiregistry.cms.hhs.gov/api-page
"""

from __future__ import annotations

from typing import Any

import httpx

from reference_lookup.providers.base import HttpProviderClient, ParseError
from reference_lookup.schemas import ProviderKind


class NpiRegistryClient(HttpProviderClient):
    """Live client for the national provider registry.

    Args:
        base_url: Registry API URL.
        version: Registry API version sent with each request.
        timeout: HTTP timeout in seconds.
        max_attempts: Attempts per call for transient failures.
        http_client: Preconfigured client; one is created when omitted.
    """

    kind = ProviderKind.REGISTRY

    def __init__(
        self,
        base_url: str,
        version: str = "2.1",
        timeout: float = 10.0,
        max_attempts: int = 3,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            max_attempts=max_attempts,
            http_client=http_client,
        )
        self.version = version

    def _params(self, query: str) -> dict[str, str]:
        return {"version": self.version, "number": query}

    def _check_shape(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise ParseError(message="registry response is not a JSON object")
        if "Errors" in data:
            raise ParseError(
                message=f"registry rejected the request: {data['Errors']!r}"[:300]
            )
        count = data.get("result_count")
        results = data.get("results", [])
        if not isinstance(count, int) or not isinstance(results, list):
            raise ParseError(
                message="registry response lacks result_count/results"
            )
        for index, result in enumerate(results):
            _check_result(index, result)
        return data


def _check_result(index: int, result: Any) -> None:
    """Reject a registry result whose nested blocks have the wrong type."""
    if not isinstance(result, dict):
        raise ParseError(message=f"registry result {index} is not a JSON object")
    for field, expected in (
        ("basic", dict),
        ("taxonomies", list),
        ("addresses", list),
    ):
        value = result.get(field)
        if value is not None and not isinstance(value, expected):
            raise ParseError(
                message=(
                    f"registry result {index} has malformed {field!r}: "
                    f"expected {expected.__name__}, got {type(value).__name__}"
                )
            )

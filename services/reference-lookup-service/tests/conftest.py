"""Pytest configuration and shared fixtures for reference-lookup-service tests.

Provides a manually advanced clock, httpx mock transports standing in for
the diagnosis and registry providers, and an orchestrator factory wired to
both.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest

from reference_lookup.config import LookupConfig
from reference_lookup.orchestrator import LookupOrchestrator
from reference_lookup.providers import (
    DiagnosisCodeClient,
    NpiRegistryClient,
    OfflineProviderClient,
)
from reference_lookup.schemas import ProviderKind

Handler = Callable[[httpx.Request], httpx.Response]

DIAGNOSIS_URL = "https://diagnosis.test/v1/codes"
REGISTRY_URL = "https://registry.test/api/"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def diagnosis_items() -> list[dict[str, Any]]:
    return [
        {
            "code": "E10.9",
            "description": "Type 1 diabetes mellitus without complications",
            "category": "Endocrine, nutritional and metabolic diseases",
            "validFrom": "2015-10-01",
            "isHeader": False,
            "shortDescription": "Type 1 diabetes w/o complications",
        },
        {
            "code": "E10",
            "description": "Type 1 diabetes mellitus",
            "category": "Endocrine, nutritional and metabolic diseases",
            "validFrom": "2015-10-01",
            "validTo": "2030-09-30",
            "isHeader": True,
        },
    ]


def registry_payload(npi: str = "1487000001") -> dict[str, Any]:
    return {
        "result_count": 1,
        "results": [
            {
                "number": npi,
                "basic": {
                    "name_prefix": "Dr.",
                    "first_name": "Ana",
                    "last_name": "Ruiz",
                },
                "taxonomies": [{"desc": "Ophthalmology"}],
                "addresses": [
                    {
                        "address_1": "10 Vision Way",
                        "address_2": "",
                        "city": "Springfield",
                        "state": "IL",
                        "zip": "62701",
                        "telephone_number": "217-555-0100",
                        "fax_number": "217-555-0101",
                    }
                ],
            }
        ],
    }


def ok_diagnosis(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=diagnosis_items())


def ok_registry(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=registry_payload(request.url.params["number"]))


def unavailable(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="Service Unavailable")


def connection_refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def config() -> LookupConfig:
    """Config with retries disabled so failures surface immediately."""
    return LookupConfig(
        diagnosis_api_url=DIAGNOSIS_URL,
        registry_api_url=REGISTRY_URL,
        retry_attempts=1,
    )


@pytest.fixture()
async def make_orchestrator(
    clock: ManualClock, config: LookupConfig
) -> AsyncGenerator[
    Callable[..., tuple[LookupOrchestrator, RecordingTransport, RecordingTransport]],
    None,
]:
    """Factory returning (orchestrator, diagnosis transport, registry transport).

    Every HTTP client the factory creates is closed at teardown.
    """
    http_clients: list[httpx.AsyncClient] = []

    def _http(transport: RecordingTransport) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=transport)
        http_clients.append(client)
        return client

    def _make(
        diagnosis_handler: Handler = ok_diagnosis,
        registry_handler: Handler = ok_registry,
        config_override: LookupConfig | None = None,
    ) -> tuple[LookupOrchestrator, RecordingTransport, RecordingTransport]:
        cfg = config_override or config
        diagnosis_transport = RecordingTransport(diagnosis_handler)
        registry_transport = RecordingTransport(registry_handler)
        clients = {
            ProviderKind.DIAGNOSIS: DiagnosisCodeClient(
                cfg.diagnosis_api_url,
                max_attempts=cfg.retry_attempts,
                http_client=_http(diagnosis_transport),
            ),
            ProviderKind.PROCEDURE: OfflineProviderClient(ProviderKind.PROCEDURE),
            ProviderKind.TERMINOLOGY: OfflineProviderClient(ProviderKind.TERMINOLOGY),
            ProviderKind.HCPCS: OfflineProviderClient(ProviderKind.HCPCS),
            ProviderKind.DRUG: OfflineProviderClient(ProviderKind.DRUG),
            ProviderKind.LAB: OfflineProviderClient(ProviderKind.LAB),
            ProviderKind.REGISTRY: NpiRegistryClient(
                cfg.registry_api_url,
                version=cfg.registry_api_version,
                max_attempts=cfg.retry_attempts,
                http_client=_http(registry_transport),
            ),
        }
        orchestrator = LookupOrchestrator(config=cfg, clock=clock, clients=clients)
        return orchestrator, diagnosis_transport, registry_transport

    yield _make

    for client in http_clients:
        await client.aclose()


@pytest.fixture()
def orchestrator(
    make_orchestrator: Callable[..., Any],
) -> LookupOrchestrator:
    """Orchestrator with healthy diagnosis and registry providers."""
    lookups, _, _ = make_orchestrator()
    return lookups

"""Provider clients, one per external registry.

- Diagnosis codes: live HTTP search (``DiagnosisCodeClient``)
- Provider registry: live NPI lookup (``NpiRegistryClient``)
- Procedure, HCPCS, drug and lab codes, terminology: no live endpoint
  (``OfflineProviderClient``)
"""

from __future__ import annotations

from reference_lookup.config import LookupConfig
from reference_lookup.providers.base import (
    HttpProviderClient,
    ParseError,
    ProviderClient,
    ProviderError,
    TransportError,
)
from reference_lookup.providers.diagnosis import DiagnosisCodeClient
from reference_lookup.providers.offline import OfflineProviderClient
from reference_lookup.providers.registry import NpiRegistryClient
from reference_lookup.schemas import ProviderKind


def build_provider_clients(config: LookupConfig) -> dict[ProviderKind, ProviderClient]:
    """Create the default client for every provider kind."""
    return {
        ProviderKind.DIAGNOSIS: DiagnosisCodeClient(
            config.diagnosis_api_url,
            timeout=config.http_timeout,
            max_attempts=config.retry_attempts,
        ),
        ProviderKind.PROCEDURE: OfflineProviderClient(ProviderKind.PROCEDURE),
        ProviderKind.TERMINOLOGY: OfflineProviderClient(ProviderKind.TERMINOLOGY),
        ProviderKind.HCPCS: OfflineProviderClient(ProviderKind.HCPCS),
        ProviderKind.DRUG: OfflineProviderClient(ProviderKind.DRUG),
        ProviderKind.LAB: OfflineProviderClient(ProviderKind.LAB),
        ProviderKind.REGISTRY: NpiRegistryClient(
            config.registry_api_url,
            version=config.registry_api_version,
            timeout=config.http_timeout,
            max_attempts=config.retry_attempts,
        ),
    }


__all__ = [
    "DiagnosisCodeClient",
    "HttpProviderClient",
    "NpiRegistryClient",
    "OfflineProviderClient",
    "ParseError",
    "ProviderClient",
    "ProviderError",
    "TransportError",
    "build_provider_clients",
]

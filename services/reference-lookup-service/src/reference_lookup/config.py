"""Configuration for the reference lookup service.

Values come from environment variables so the HTTP entry point and any
embedding application share the same semantics.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

_DEFAULT_DIAGNOSIS_URL = "https://api.icd10api.com/v1/codes"
_DEFAULT_REGISTRY_URL = "https://npiregistry.cms.hhs.gov/api/"


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _positive_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class LookupConfig:
    """Configuration for provider clients, cache, and rate limiting.

    Attributes:
        diagnosis_api_url: Search endpoint for the diagnosis-code provider.
        registry_api_url: National provider registry endpoint.
        registry_api_version: Value sent as the registry ``version`` param.
        http_timeout: Per-request timeout in seconds.
        retry_attempts: Attempts per provider call (1 disables retry).
        cache_ttl_seconds: Age at which cached values are treated as stale.
        rate_window_seconds: Length of each provider's fixed rate window.
        diagnosis_rate_limit: Calls per window for diagnosis-code search.
        procedure_rate_limit: Calls per window for procedure-code search.
        terminology_rate_limit: Calls per window for terminology search.
        hcpcs_rate_limit: Calls per window for HCPCS search.
        drug_rate_limit: Calls per window for drug-code search.
        lab_rate_limit: Calls per window for laboratory-code search.
        registry_rate_limit: Calls per window for the provider registry.
    """

    diagnosis_api_url: str = _DEFAULT_DIAGNOSIS_URL
    registry_api_url: str = _DEFAULT_REGISTRY_URL
    registry_api_version: str = "2.1"
    http_timeout: float = 10.0
    retry_attempts: int = 3
    cache_ttl_seconds: float = 24 * 60 * 60
    rate_window_seconds: float = 60.0
    diagnosis_rate_limit: int = 100
    procedure_rate_limit: int = 50
    terminology_rate_limit: int = 50
    hcpcs_rate_limit: int = 50
    drug_rate_limit: int = 50
    lab_rate_limit: int = 50
    registry_rate_limit: int = 30

    @classmethod
    def from_env(cls) -> "LookupConfig":
        """Create LookupConfig from environment variables."""
        return cls(
            diagnosis_api_url=os.getenv("DIAGNOSIS_API_URL", cls.diagnosis_api_url),
            registry_api_url=os.getenv("NPI_REGISTRY_URL", cls.registry_api_url),
            registry_api_version=os.getenv(
                "NPI_REGISTRY_VERSION", cls.registry_api_version
            ),
            http_timeout=_positive_float(
                "LOOKUP_HTTP_TIMEOUT_SECONDS", cls.http_timeout
            ),
            retry_attempts=_positive_int("LOOKUP_RETRY_ATTEMPTS", cls.retry_attempts),
            cache_ttl_seconds=_positive_float(
                "LOOKUP_CACHE_TTL_SECONDS", cls.cache_ttl_seconds
            ),
            rate_window_seconds=_positive_float(
                "LOOKUP_RATE_WINDOW_SECONDS", cls.rate_window_seconds
            ),
            diagnosis_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_DIAGNOSIS", cls.diagnosis_rate_limit
            ),
            procedure_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_PROCEDURE", cls.procedure_rate_limit
            ),
            terminology_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_TERMINOLOGY", cls.terminology_rate_limit
            ),
            hcpcs_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_HCPCS", cls.hcpcs_rate_limit
            ),
            drug_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_DRUG", cls.drug_rate_limit
            ),
            lab_rate_limit=_positive_int("LOOKUP_RATE_LIMIT_LAB", cls.lab_rate_limit),
            registry_rate_limit=_positive_int(
                "LOOKUP_RATE_LIMIT_REGISTRY", cls.registry_rate_limit
            ),
        )

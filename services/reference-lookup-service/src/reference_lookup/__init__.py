"""Reference-data lookup service for clinical codes and provider identity.

Fronts the external diagnosis-code, procedure-code, HCPCS, drug-code,
laboratory-code, terminology and national provider registry sources with
caching, per-provider rate limiting, response normalization, and a static
fallback knowledge base.

Example usage::

    from reference_lookup import LookupOrchestrator

    async with LookupOrchestrator() as lookups:
        result = await lookups.search_diagnosis_codes("diabetes")
        if result.succeeded:
            for code in result.value:
                print(code.code, code.description)
"""

from reference_lookup.config import LookupConfig
from reference_lookup.orchestrator import LookupOrchestrator
from reference_lookup.schemas import (
    CacheStats,
    DiagnosisCode,
    LookupResult,
    ProcedureCode,
    ProviderAddress,
    ProviderRecord,
    TerminologyEntry,
)

__all__ = [
    "CacheStats",
    "DiagnosisCode",
    "LookupConfig",
    "LookupOrchestrator",
    "LookupResult",
    "ProcedureCode",
    "ProviderAddress",
    "ProviderRecord",
    "TerminologyEntry",
]

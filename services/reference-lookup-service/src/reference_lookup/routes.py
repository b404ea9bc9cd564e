"""FastAPI router exposing the lookup operations to the UI layer.

Every endpoint answers 200 with the ``LookupResult`` envelope; lookup
failures (rate limiting, unverifiable providers, empty queries) are
reported inside the envelope rather than as HTTP errors.

Endpoints:
    GET    /api/lookup/diagnosis-codes?q=
    GET    /api/lookup/procedure-codes?q=
    GET    /api/lookup/hcpcs-codes?q=
    GET    /api/lookup/drug-codes?q=
    GET    /api/lookup/lab-codes?q=
    GET    /api/lookup/terminology?q=
    GET    /api/lookup/providers/{npi}
    GET    /api/lookup/providers?q=
    GET    /api/lookup/codes/batch?kind=diagnosis&codes=E11.9&codes=I10
    GET    /api/lookup/cache/stats
    DELETE /api/lookup/cache
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from reference_lookup.dependencies import get_orchestrator
from reference_lookup.orchestrator import BATCH_KINDS, LookupOrchestrator
from reference_lookup.schemas import CacheStats, LookupResult, ProviderKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lookup", tags=["lookup"])

_BATCH_KIND_NAMES = sorted(kind.value for kind in BATCH_KINDS)


@router.get("/diagnosis-codes")
async def search_diagnosis_codes(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_diagnosis_codes(q)


@router.get("/procedure-codes")
async def search_procedure_codes(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_procedure_codes(q)


@router.get("/hcpcs-codes")
async def search_hcpcs_codes(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_hcpcs_codes(q)


@router.get("/drug-codes")
async def search_drug_codes(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_drug_codes(q)


@router.get("/lab-codes")
async def search_lab_codes(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_lab_codes(q)


@router.get("/terminology")
async def search_terminology(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_terminology(q)


@router.get("/providers/{npi}")
async def lookup_provider(
    npi: str,
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.lookup_provider_by_identifier(npi)


@router.get("/providers")
async def search_providers(
    q: str = Query(..., min_length=1),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    return await orchestrator.search_providers_by_query(q)


@router.get("/codes/batch")
async def batch_search_codes(
    kind: str,
    codes: list[str] = Query(...),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> LookupResult:
    """Search several codes of one kind in a single request.

    Raises:
        HTTPException: 400 if ``kind`` is not a batchable code system.
    """
    if kind not in _BATCH_KIND_NAMES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Invalid code kind '{kind}'. "
                f"Must be one of: {', '.join(_BATCH_KIND_NAMES)}"
            ),
        )
    return await orchestrator.batch_search_codes(codes, ProviderKind(kind))


@router.get("/cache/stats")
async def cache_stats(
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> CacheStats:
    return orchestrator.cache_stats()


@router.delete("/cache")
async def clear_cache(
    orchestrator: LookupOrchestrator = Depends(get_orchestrator),
) -> dict[str, str]:
    orchestrator.clear_cache()
    logger.info("Cache cleared via API")
    return {"status": "cleared"}

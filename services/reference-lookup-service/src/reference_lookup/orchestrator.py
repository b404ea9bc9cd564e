"""Lookup orchestrator: the public face of the reference lookup service.

Every search runs the same state machine:

1. Cache hit -> return immediately (no rate-limit check, no network call).
2. Rate window exhausted -> failed result; nothing is cached, no fallback.
3. Record the attempt and ask the provider client.
   - Live data -> normalize, cache, return.
   - Transport/parse failure, or a provider with no live endpoint ->
     fallback knowledge base, cache, return as a *successful* result
     flagged with ``DEGRADED_MESSAGE``.

Provider-by-identifier lookup has no fallback: a registry failure is a
failed result and an affirmative "no match" is a success with no value.

No exception escapes the orchestrator; every path ends in a
``LookupResult``. Concurrent identical lookups are not coalesced, so two
callers missing the cache together may both reach the provider.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from reference_lookup.cache import CacheStore, make_cache_key
from reference_lookup.clock import Clock, SystemClock
from reference_lookup.config import LookupConfig
from reference_lookup.fallback import FallbackKnowledgeBase
from reference_lookup.normalizer import normalize_diagnosis_codes, normalize_provider
from reference_lookup.providers import (
    ParseError,
    ProviderClient,
    ProviderError,
    TransportError,
    build_provider_clients,
)
from reference_lookup.rate_limiter import RateLimiter
from reference_lookup.schemas import CacheStats, LookupResult, ProviderKind

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "rate limit exceeded"
DEGRADED_MESSAGE = "using cached data due to API error"
UNVERIFIED_PROVIDER_MESSAGE = "unable to verify provider"
EMPTY_QUERY_MESSAGE = "query is required"
INVALID_IDENTIFIER_MESSAGE = "invalid provider identifier"

_NUMERIC_IDENTIFIER = re.compile(r"[0-9]+")

BATCH_KINDS = frozenset(
    {ProviderKind.DIAGNOSIS, ProviderKind.PROCEDURE, ProviderKind.HCPCS}
)


class LookupOrchestrator:
    """Unified client over the diagnosis, procedure, HCPCS, drug, laboratory,
    terminology and provider registry sources.

    Owns one cache store and one rate limiter for its lifetime. Build one
    per process (or per test) and share the instance.

    Args:
        config: Service configuration; read from the environment if omitted.
        clock: Time source shared by the cache and rate limiter.
        clients: Provider clients by kind; defaults are built from config.
        fallback: Static fallback datasets.
    """

    def __init__(
        self,
        config: LookupConfig | None = None,
        clock: Clock | None = None,
        clients: Mapping[ProviderKind, ProviderClient] | None = None,
        fallback: FallbackKnowledgeBase | None = None,
    ) -> None:
        self.config = config or LookupConfig.from_env()
        self._clock = clock or SystemClock()
        self._cache = CacheStore(ttl=self.config.cache_ttl_seconds, clock=self._clock)
        self._rate_limiter = RateLimiter(
            limits={
                ProviderKind.DIAGNOSIS: self.config.diagnosis_rate_limit,
                ProviderKind.PROCEDURE: self.config.procedure_rate_limit,
                ProviderKind.TERMINOLOGY: self.config.terminology_rate_limit,
                ProviderKind.HCPCS: self.config.hcpcs_rate_limit,
                ProviderKind.DRUG: self.config.drug_rate_limit,
                ProviderKind.LAB: self.config.lab_rate_limit,
                ProviderKind.REGISTRY: self.config.registry_rate_limit,
            },
            window_seconds=self.config.rate_window_seconds,
            clock=self._clock,
        )
        self._clients = dict(clients) if clients else build_provider_clients(self.config)
        self._fallback = fallback or FallbackKnowledgeBase()
        logger.info(
            "Lookup orchestrator ready (live providers: %s)",
            ", ".join(
                kind.value for kind, client in self._clients.items() if client.is_live
            )
            or "none",
        )

    # -- Context manager --------------------------------------------------

    async def __aenter__(self) -> "LookupOrchestrator":
        return self

    async def __aexit__(self, _exc_type: object, _exc: object, _tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close every provider client."""
        for client in self._clients.values():
            await client.aclose()

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    # -- Public API --------------------------------------------------------

    async def search_diagnosis_codes(self, query: str) -> LookupResult[Any]:
        """Search ICD-10 diagnosis codes, falling back to static data."""
        return await self._search(
            "icd10",
            ProviderKind.DIAGNOSIS,
            query,
            normalize_diagnosis_codes,
            self._fallback.diagnosis_codes,
        )

    async def search_procedure_codes(self, query: str) -> LookupResult[Any]:
        """Search CPT procedure codes (always answered by fallback data)."""
        return await self._search(
            "cpt",
            ProviderKind.PROCEDURE,
            query,
            None,
            self._fallback.procedure_codes,
        )

    async def search_hcpcs_codes(self, query: str) -> LookupResult[Any]:
        """Search HCPCS Level II codes (always answered by fallback data)."""
        return await self._search(
            "hcpcs",
            ProviderKind.HCPCS,
            query,
            None,
            self._fallback.hcpcs_codes,
        )

    async def search_drug_codes(self, query: str) -> LookupResult[Any]:
        """Search HCPCS J-codes for injectable drugs (fallback data only)."""
        return await self._search(
            "drug_codes",
            ProviderKind.DRUG,
            query,
            None,
            self._fallback.drug_codes,
        )

    async def search_lab_codes(self, query: str) -> LookupResult[Any]:
        """Search CPT laboratory panel codes (fallback data only)."""
        return await self._search(
            "lab_codes",
            ProviderKind.LAB,
            query,
            None,
            self._fallback.lab_codes,
        )

    async def search_terminology(self, query: str) -> LookupResult[Any]:
        """Search clinical terminology (always answered by fallback data)."""
        return await self._search(
            "terminology",
            ProviderKind.TERMINOLOGY,
            query,
            None,
            self._fallback.terminology,
        )

    async def lookup_provider_by_identifier(self, identifier: str) -> LookupResult[Any]:
        """Look up one provider in the national registry by NPI.

        Returns a success with ``value=None`` when the registry reports no
        match, and a failure when the registry cannot be reached or answers
        with a malformed body.
        """
        npi = (identifier or "").strip()
        if not _NUMERIC_IDENTIFIER.fullmatch(npi):
            return LookupResult.failure(INVALID_IDENTIFIER_MESSAGE)

        cache_key = make_cache_key("npi", npi)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return LookupResult.success(cached, served_from_cache=True)

        if not self._rate_limiter.can_call(ProviderKind.REGISTRY):
            logger.warning("Rate limit exceeded for registry lookup of %s", npi)
            return LookupResult.failure(RATE_LIMIT_MESSAGE)

        self._rate_limiter.record_call(ProviderKind.REGISTRY)
        client = self._clients[ProviderKind.REGISTRY]
        try:
            raw = await client.fetch_raw(npi)
        except (TransportError, ParseError) as exc:
            logger.warning("Registry lookup failed for %s: %s", npi, exc)
            return LookupResult.failure(UNVERIFIED_PROVIDER_MESSAGE)

        if not raw or raw.get("result_count", 0) == 0 or not raw.get("results"):
            logger.debug("Registry reports no provider for %s", npi)
            return LookupResult.success(None)

        try:
            record = normalize_provider(raw["results"][0])
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Malformed registry record for %s: %s", npi, exc)
            return LookupResult.failure(UNVERIFIED_PROVIDER_MESSAGE)
        self._cache.set(cache_key, record)
        return LookupResult.success(record)

    async def search_providers_by_query(self, query: str) -> LookupResult[Any]:
        """Free-text provider search; answers with the fixed sample directory."""
        if not query or not query.strip():
            return LookupResult.failure(EMPTY_QUERY_MESSAGE)

        cache_key = make_cache_key("providers", query)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return LookupResult.success(list(cached), served_from_cache=True)

        providers = self._fallback.sample_providers()
        self._cache.set(cache_key, tuple(providers))
        return LookupResult.success(providers)

    async def batch_search_codes(
        self, codes: Sequence[str], kind: ProviderKind
    ) -> LookupResult[Any]:
        """Search several codes of one kind concurrently and merge the results.

        Values are flattened in input order with duplicate codes dropped.
        The batch succeeds when at least one search succeeded.
        """
        if kind not in BATCH_KINDS:
            return LookupResult.failure(f"batch search not supported for {kind.value}")
        queries = [code for code in codes if code and code.strip()]
        if not queries:
            return LookupResult.failure(EMPTY_QUERY_MESSAGE)

        search = {
            ProviderKind.DIAGNOSIS: self.search_diagnosis_codes,
            ProviderKind.PROCEDURE: self.search_procedure_codes,
            ProviderKind.HCPCS: self.search_hcpcs_codes,
        }[kind]
        results = await asyncio.gather(*(search(query) for query in queries))

        merged: list[Any] = []
        seen: set[str] = set()
        errors: list[str] = []
        for query, result in zip(queries, results):
            if not result.succeeded:
                errors.append(f"{query}: {result.error_message}")
                continue
            if result.error_message:
                errors.append(f"{query}: {result.error_message}")
            for record in result.value or []:
                if record.code not in seen:
                    seen.add(record.code)
                    merged.append(record)

        if not any(result.succeeded for result in results):
            return LookupResult.failure("; ".join(errors))
        return LookupResult.success(merged, error_message="; ".join(errors) or None)

    def clear_cache(self) -> None:
        """Drop every cached lookup."""
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        """Report the size and keys of the cache."""
        return self._cache.stats()

    # -- Internal ----------------------------------------------------------

    async def _search(
        self,
        operation: str,
        kind: ProviderKind,
        query: str,
        normalize: Callable[[Any], list[Any]] | None,
        fallback: Callable[[str], list[Any]],
    ) -> LookupResult[Any]:
        if not query or not query.strip():
            return LookupResult.failure(EMPTY_QUERY_MESSAGE)

        cache_key = make_cache_key(operation, query)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return LookupResult.success(list(cached), served_from_cache=True)

        if not self._rate_limiter.can_call(kind):
            logger.warning("Rate limit exceeded for %s search %r", kind.value, query)
            return LookupResult.failure(RATE_LIMIT_MESSAGE)

        self._rate_limiter.record_call(kind)
        client = self._clients[kind]
        try:
            raw = await client.fetch_raw(query)
        except ProviderError as exc:
            logger.warning(
                "%s provider failed for %r, using fallback data: %s",
                kind.value,
                query,
                exc,
            )
            raw = None

        if raw is not None and normalize is not None:
            try:
                records = normalize(raw)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning(
                    "%s provider returned malformed data for %r: %s",
                    kind.value,
                    query,
                    exc,
                )
            else:
                self._cache.set(cache_key, tuple(records))
                return LookupResult.success(records)

        records = fallback(query)
        self._cache.set(cache_key, tuple(records))
        return LookupResult.success(records, error_message=DEGRADED_MESSAGE)

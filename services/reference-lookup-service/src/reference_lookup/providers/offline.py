"""Providers with no live endpoint wired.

Procedure, HCPCS, drug and lab code searches and terminology searches are
answered entirely from the fallback knowledge base. These clients exist so
the orchestrator can dispatch every provider the same way.
"""

from __future__ import annotations

from reference_lookup.providers.base import ProviderClient
from reference_lookup.schemas import ProviderKind


class OfflineProviderClient(ProviderClient):
    """No-op client whose ``fetch_raw`` always defers to the fallback."""

    is_live = False

    def __init__(self, kind: ProviderKind) -> None:
        self.kind = kind

    async def fetch_raw(self, query: str) -> None:
        return None

    def __repr__(self) -> str:
        return f"OfflineProviderClient({self.kind.value!r})"

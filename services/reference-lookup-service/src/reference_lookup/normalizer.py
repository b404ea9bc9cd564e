"""Map provider-shaped responses onto the canonical records.

Diagnosis items map field-for-field, with missing text fields defaulting to
empty strings and ``isHeader`` to False. Registry records derive a display
name, primary address text, phone and specialty from the first name,
address and taxonomy blocks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from reference_lookup.schemas import DiagnosisCode, ProviderAddress, ProviderRecord

logger = logging.getLogger(__name__)

ADDRESS_NOT_AVAILABLE = "Address not available"
UNKNOWN_SPECIALTY = "Unknown"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _blocks(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        return []
    return [block for block in value if isinstance(block, Mapping)]


def normalize_diagnosis_codes(items: Sequence[Any]) -> list[DiagnosisCode]:
    """Convert the diagnosis provider's JSON array into DiagnosisCode records.

    Non-object items are skipped with a warning.
    """
    codes: list[DiagnosisCode] = []
    for item in items:
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-object diagnosis item: %r", item)
            continue
        codes.append(
            DiagnosisCode(
                code=_text(item.get("code")),
                description=_text(item.get("description")),
                category=_text(item.get("category")),
                valid_from=_text(item.get("validFrom")),
                valid_to=_optional_text(item.get("validTo")),
                is_header=_flag(item.get("isHeader")),
                short_description=_optional_text(item.get("shortDescription")),
            )
        )
    return codes


def _normalize_address(raw: Mapping[str, Any]) -> ProviderAddress:
    return ProviderAddress(
        line1=_text(raw.get("address_1")),
        line2=_optional_text(raw.get("address_2")),
        city=_text(raw.get("city")),
        state=_text(raw.get("state")),
        zip=_text(raw.get("zip") or raw.get("postal_code")),
        phone=_optional_text(raw.get("telephone_number")),
        fax=_optional_text(raw.get("fax_number")),
    )


def format_address(address: ProviderAddress) -> str:
    """Comma-join the non-empty address parts."""
    parts = [address.line1, address.line2, address.city, address.state, address.zip]
    return ", ".join(part for part in parts if part)


def normalize_provider(raw: Mapping[str, Any]) -> ProviderRecord:
    """Convert one registry result into a ProviderRecord.

    The display name is the organization name when present; otherwise the
    trimmed ``"<prefix> <first> <last>"``.
    """
    basic = raw.get("basic") or {}
    if not isinstance(basic, Mapping):
        basic = {}

    organization_name = _optional_text(basic.get("organization_name"))
    first_last = " ".join(
        part
        for part in (_text(basic.get("first_name")), _text(basic.get("last_name")))
        if part
    )
    individual_name = first_last or None
    if organization_name:
        display_name = organization_name
    else:
        display_name = f"{_text(basic.get('name_prefix'))} {first_last}".strip()

    taxonomies = [
        _text(taxonomy.get("desc"))
        for taxonomy in _blocks(raw.get("taxonomies"))
        if _text(taxonomy.get("desc"))
    ]
    addresses = [
        _normalize_address(address) for address in _blocks(raw.get("addresses"))
    ]

    if addresses:
        primary_address_text = format_address(addresses[0]) or ADDRESS_NOT_AVAILABLE
        primary_phone = addresses[0].phone or ""
    else:
        primary_address_text = ADDRESS_NOT_AVAILABLE
        primary_phone = ""

    return ProviderRecord(
        identifier=_text(raw.get("number")),
        display_name=display_name,
        specialty=taxonomies[0] if taxonomies else UNKNOWN_SPECIALTY,
        primary_address_text=primary_address_text,
        primary_phone=primary_phone,
        organization_name=organization_name,
        individual_name=individual_name,
        taxonomies=taxonomies,
        addresses=addresses,
    )

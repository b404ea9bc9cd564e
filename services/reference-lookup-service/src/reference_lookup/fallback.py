"""Static fallback knowledge base used when a live provider cannot answer.

Queries are lower-cased and matched against fixed keywords. Every keyword
group whose keywords appear in the query contributes its records, in the
order the groups are declared below, without duplicates. A query that
matches nothing yields an empty list, never an error.

Terminology entries match when their abbreviation or any synonym occurs in
the query, with the same substring rule as the code datasets.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from reference_lookup.schemas import (
    DiagnosisCode,
    ProcedureCode,
    ProviderAddress,
    ProviderRecord,
    TerminologyEntry,
)

R = TypeVar("R")

_ICD10_EFFECTIVE = "2015-10-01"
_CPT_EFFECTIVE = "2024-01-01"

_LAB = "Pathology and Laboratory"


@dataclass(frozen=True)
class KeywordGroup(Generic[R]):
    """Records returned when any of ``keywords`` occurs in a query."""

    keywords: tuple[str, ...]
    records: tuple[R, ...]


# ---------------------------------------------------------------------------
# Diagnosis codes
# ---------------------------------------------------------------------------

_ENDOCRINE = "Endocrine, nutritional and metabolic diseases"
_EYE = "Diseases of the eye and adnexa"
_CIRCULATORY = "Diseases of the circulatory system"

DIAGNOSIS_GROUPS: tuple[KeywordGroup[DiagnosisCode], ...] = (
    KeywordGroup(
        keywords=("diabetes", "diabetic"),
        records=(
            DiagnosisCode(
                code="E11.9",
                description="Type 2 diabetes mellitus without complications",
                category=_ENDOCRINE,
                valid_from=_ICD10_EFFECTIVE,
                short_description="Type 2 diabetes w/o complications",
            ),
            DiagnosisCode(
                code="E11.21",
                description="Type 2 diabetes mellitus with diabetic nephropathy",
                category=_ENDOCRINE,
                valid_from=_ICD10_EFFECTIVE,
                short_description="Type 2 diabetes w diabetic nephropathy",
            ),
            DiagnosisCode(
                code="E11.22",
                description=(
                    "Type 2 diabetes mellitus with diabetic chronic kidney disease"
                ),
                category=_ENDOCRINE,
                valid_from=_ICD10_EFFECTIVE,
                short_description="Type 2 diabetes w diabetic CKD",
            ),
        ),
    ),
    KeywordGroup(
        keywords=("retinopathy", "eye", "retinal"),
        records=(
            DiagnosisCode(
                code="H35.00",
                description="Unspecified background retinopathy",
                category=_EYE,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="H35.01",
                description="Mild nonproliferative diabetic retinopathy",
                category=_EYE,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="H35.02",
                description="Moderate nonproliferative diabetic retinopathy",
                category=_EYE,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="H35.03",
                description="Severe nonproliferative diabetic retinopathy",
                category=_EYE,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="H35.04",
                description="Proliferative diabetic retinopathy",
                category=_EYE,
                valid_from=_ICD10_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("hypertension", "hypertensive", "blood pressure"),
        records=(
            DiagnosisCode(
                code="I10",
                description="Essential (primary) hypertension",
                category=_CIRCULATORY,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="I11.9",
                description="Hypertensive heart disease without heart failure",
                category=_CIRCULATORY,
                valid_from=_ICD10_EFFECTIVE,
            ),
            DiagnosisCode(
                code="I12.9",
                description=(
                    "Hypertensive chronic kidney disease with stage 1 through "
                    "stage 4 chronic kidney disease, or unspecified chronic "
                    "kidney disease"
                ),
                category=_CIRCULATORY,
                valid_from=_ICD10_EFFECTIVE,
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Procedure codes (CPT)
# ---------------------------------------------------------------------------

PROCEDURE_GROUPS: tuple[KeywordGroup[ProcedureCode], ...] = (
    KeywordGroup(
        keywords=("retinal", "retina", "fundus", "imaging", "eye"),
        records=(
            ProcedureCode(
                code="92250",
                description="Fundus photography with interpretation and report",
                category="Ophthalmology",
                relative_value_units=1.17,
                modifiers=["26", "TC"],
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="92227",
                description=(
                    "Imaging of retina for detection or monitoring of disease; "
                    "with remote clinical staff review and report"
                ),
                category="Ophthalmology",
                relative_value_units=0.43,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="92228",
                description=(
                    "Imaging of retina for detection or monitoring of disease; "
                    "with remote physician or other qualified health care "
                    "professional interpretation and report"
                ),
                category="Ophthalmology",
                relative_value_units=0.92,
                modifiers=["26", "TC"],
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="92229",
                description=(
                    "Imaging of retina for detection or monitoring of disease; "
                    "point-of-care autonomous analysis and report"
                ),
                category="Ophthalmology",
                relative_value_units=1.15,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("diabetes", "diabetic", "management"),
        records=(
            ProcedureCode(
                code="99213",
                description=(
                    "Office or other outpatient visit for the evaluation and "
                    "management of an established patient, low level of "
                    "medical decision making"
                ),
                category="Evaluation and Management",
                relative_value_units=2.65,
                modifiers=["25"],
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="99214",
                description=(
                    "Office or other outpatient visit for the evaluation and "
                    "management of an established patient, moderate level of "
                    "medical decision making"
                ),
                category="Evaluation and Management",
                relative_value_units=3.73,
                modifiers=["25"],
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="95251",
                description=(
                    "Ambulatory continuous glucose monitoring of interstitial "
                    "tissue fluid; analysis, interpretation and report"
                ),
                category="Medicine",
                relative_value_units=1.02,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("lab", "laboratory", "a1c", "panel"),
        records=(
            ProcedureCode(
                code="83036",
                description="Hemoglobin; glycosylated (A1C)",
                category=_LAB,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="80053",
                description="Comprehensive metabolic panel",
                category=_LAB,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="80061",
                description="Lipid panel",
                category=_LAB,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# HCPCS Level II codes
# ---------------------------------------------------------------------------

_HCPCS = "HCPCS Level II"

HCPCS_GROUPS: tuple[KeywordGroup[ProcedureCode], ...] = (
    KeywordGroup(
        keywords=("diabetes", "diabetic", "self-management", "training"),
        records=(
            ProcedureCode(
                code="G0108",
                description=(
                    "Diabetes outpatient self-management training services, "
                    "individual, per 30 minutes"
                ),
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="G0109",
                description=(
                    "Diabetes outpatient self-management training services, "
                    "group session (2 or more), per 30 minutes"
                ),
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("vaccine", "influenza", "flu", "pneumococcal", "hepatitis"),
        records=(
            ProcedureCode(
                code="G0008",
                description="Administration of influenza virus vaccine",
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="G0009",
                description="Administration of pneumococcal vaccine",
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="G0010",
                description="Administration of hepatitis B vaccine",
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("wellness", "preventive", "annual"),
        records=(
            ProcedureCode(
                code="G0402",
                description="Initial preventive physical examination",
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="G0438",
                description=(
                    "Annual wellness visit; includes a personalized prevention "
                    "plan of service, initial visit"
                ),
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
    KeywordGroup(
        keywords=("nutrition",),
        records=(
            ProcedureCode(
                code="G0270",
                description=(
                    "Medical nutrition therapy; reassessment and subsequent "
                    "intervention(s), individual, each 15 minutes"
                ),
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
            ProcedureCode(
                code="G0271",
                description=(
                    "Medical nutrition therapy; reassessment and subsequent "
                    "intervention(s), group (2 or more), each 30 minutes"
                ),
                category=_HCPCS,
                valid_from=_CPT_EFFECTIVE,
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Drug codes (HCPCS J-codes)
# ---------------------------------------------------------------------------

_DRUGS = "Drugs Administered Other Than Oral Method"


def _insulin(code: str, description: str) -> ProcedureCode:
    return ProcedureCode(
        code=code, description=description, category=_DRUGS, valid_from=_CPT_EFFECTIVE
    )


_INSULINS: dict[str, ProcedureCode] = {
    code: _insulin(code, description)
    for code, description in (
        ("J1817", "Insulin aspart, 100 units"),
        ("J1818", "Insulin glargine, 100 units"),
        ("J1841", "Insulin lispro, 100 units"),
        ("J1842", "Insulin detemir, 100 units"),
        ("J1843", "Insulin glulisine, 100 units"),
        ("J1844", "Insulin degludec, 100 units"),
        ("J1845", "Insulin glargine, 300 units"),
        ("J1846", "Insulin lispro, 200 units"),
        ("J1847", "Insulin aspart, 200 units"),
        ("J1848", "Insulin degludec, 200 units"),
    )
}

DRUG_GROUPS: tuple[KeywordGroup[ProcedureCode], ...] = (
    KeywordGroup(
        keywords=("aspart", "novolog"),
        records=(_INSULINS["J1817"], _INSULINS["J1847"]),
    ),
    KeywordGroup(
        keywords=("glargine", "lantus", "toujeo"),
        records=(_INSULINS["J1818"], _INSULINS["J1845"]),
    ),
    KeywordGroup(
        keywords=("lispro", "humalog"),
        records=(_INSULINS["J1841"], _INSULINS["J1846"]),
    ),
    KeywordGroup(keywords=("detemir", "levemir"), records=(_INSULINS["J1842"],)),
    KeywordGroup(keywords=("glulisine", "apidra"), records=(_INSULINS["J1843"],)),
    KeywordGroup(
        keywords=("degludec", "tresiba"),
        records=(_INSULINS["J1844"], _INSULINS["J1848"]),
    ),
    KeywordGroup(keywords=("insulin",), records=tuple(_INSULINS.values())),
)

# ---------------------------------------------------------------------------
# Laboratory panels
# ---------------------------------------------------------------------------


def _panel(code: str, description: str) -> ProcedureCode:
    return ProcedureCode(
        code=code, description=description, category=_LAB, valid_from=_CPT_EFFECTIVE
    )


LAB_GROUPS: tuple[KeywordGroup[ProcedureCode], ...] = (
    KeywordGroup(
        keywords=("metabolic", "bmp", "cmp", "chemistry"),
        records=(
            _panel("80048", "Basic metabolic panel"),
            _panel("80053", "Comprehensive metabolic panel"),
        ),
    ),
    KeywordGroup(
        keywords=("general health", "wellness"),
        records=(_panel("80050", "General health panel"),),
    ),
    KeywordGroup(
        keywords=("electrolyte",),
        records=(_panel("80051", "Electrolyte panel"),),
    ),
    KeywordGroup(
        keywords=("obstetric", "prenatal", "pregnancy"),
        records=(
            _panel("80055", "Obstetric panel"),
            _panel("80081", "Obstetric panel (includes HIV testing)"),
        ),
    ),
    KeywordGroup(
        keywords=("lipid", "cholesterol"),
        records=(_panel("80061", "Lipid panel"),),
    ),
    KeywordGroup(
        keywords=("renal", "kidney"),
        records=(_panel("80069", "Renal function panel"),),
    ),
    KeywordGroup(
        keywords=("hepatic", "liver", "hepatitis"),
        records=(
            _panel("80074", "Acute hepatitis panel"),
            _panel("80076", "Hepatic function panel"),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Terminology
# ---------------------------------------------------------------------------

TERMINOLOGY_ENTRIES: tuple[TerminologyEntry, ...] = (
    TerminologyEntry(
        term="OD",
        definition="Oculus Dexter - Right Eye",
        category="Ophthalmology",
        synonyms=frozenset({"oculus dexter", "right eye"}),
        related_terms=frozenset({"OS", "OU"}),
    ),
    TerminologyEntry(
        term="OS",
        definition="Oculus Sinister - Left Eye",
        category="Ophthalmology",
        synonyms=frozenset({"oculus sinister", "left eye"}),
        related_terms=frozenset({"OD", "OU"}),
    ),
    TerminologyEntry(
        term="OU",
        definition="Oculus Uterque - Both Eyes",
        category="Ophthalmology",
        synonyms=frozenset({"oculus uterque", "both eyes"}),
        related_terms=frozenset({"OD", "OS"}),
    ),
    TerminologyEntry(
        term="PCP",
        definition="Primary Care Physician",
        category="Provider Roles",
        synonyms=frozenset({"primary care physician", "primary care provider"}),
        related_terms=frozenset({"NPI"}),
    ),
    TerminologyEntry(
        term="HEDIS",
        definition="Healthcare Effectiveness Data and Information Set",
        category="Quality Measures",
        synonyms=frozenset({"healthcare effectiveness data and information set"}),
        related_terms=frozenset({"NCQA", "PCP"}),
    ),
)

TERMINOLOGY_GROUPS: tuple[KeywordGroup[TerminologyEntry], ...] = tuple(
    KeywordGroup(
        keywords=(entry.term.lower(), *sorted(entry.synonyms or ())),
        records=(entry,),
    )
    for entry in TERMINOLOGY_ENTRIES
)

# ---------------------------------------------------------------------------
# Provider directory sample
# ---------------------------------------------------------------------------

SAMPLE_PROVIDERS: tuple[ProviderRecord, ...] = (
    ProviderRecord(
        identifier="1234567890",
        display_name="Dr. Sarah Johnson",
        specialty="Endocrinology",
        primary_address_text="123 Medical Center Dr, Suite 100, Anytown, CA, 90210",
        primary_phone="(555) 123-4567",
        individual_name="Sarah Johnson",
        taxonomies=["Endocrinology, Diabetes & Metabolism"],
        addresses=[
            ProviderAddress(
                line1="123 Medical Center Dr",
                line2="Suite 100",
                city="Anytown",
                state="CA",
                zip="90210",
                phone="(555) 123-4567",
            )
        ],
    ),
    ProviderRecord(
        identifier="0987654321",
        display_name="Dr. Michael Chen",
        specialty="Ophthalmology",
        primary_address_text="456 Eye Care Blvd, Anytown, CA, 90210",
        primary_phone="(555) 987-6543",
        individual_name="Michael Chen",
        taxonomies=["Ophthalmology"],
        addresses=[
            ProviderAddress(
                line1="456 Eye Care Blvd",
                city="Anytown",
                state="CA",
                zip="90210",
                phone="(555) 987-6543",
            )
        ],
    ),
)


def _substring_match(
    groups: Sequence[KeywordGroup[R]], query: str, key: str
) -> list[R]:
    lowered = query.lower()
    seen: set[str] = set()
    matched: list[R] = []
    for group in groups:
        if not any(keyword in lowered for keyword in group.keywords):
            continue
        for record in group.records:
            ident = getattr(record, key)
            if ident not in seen:
                seen.add(ident)
                matched.append(record)
    return matched


class FallbackKnowledgeBase:
    """Deterministic keyword lookup over the static datasets above."""

    def diagnosis_codes(self, query: str) -> list[DiagnosisCode]:
        return _substring_match(DIAGNOSIS_GROUPS, query, "code")

    def procedure_codes(self, query: str) -> list[ProcedureCode]:
        return _substring_match(PROCEDURE_GROUPS, query, "code")

    def hcpcs_codes(self, query: str) -> list[ProcedureCode]:
        return _substring_match(HCPCS_GROUPS, query, "code")

    def drug_codes(self, query: str) -> list[ProcedureCode]:
        return _substring_match(DRUG_GROUPS, query, "code")

    def lab_codes(self, query: str) -> list[ProcedureCode]:
        return _substring_match(LAB_GROUPS, query, "code")

    def terminology(self, query: str) -> list[TerminologyEntry]:
        return _substring_match(TERMINOLOGY_GROUPS, query, "term")

    def sample_providers(self) -> list[ProviderRecord]:
        """Fixed provider directory sample returned for free-text searches."""
        return list(SAMPLE_PROVIDERS)

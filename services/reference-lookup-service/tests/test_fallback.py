"""Tests for the static fallback knowledge base keyword mappings."""

from __future__ import annotations

import pytest

from reference_lookup.fallback import FallbackKnowledgeBase


@pytest.fixture()
def kb() -> FallbackKnowledgeBase:
    return FallbackKnowledgeBase()


class TestDiagnosisFallback:
    """Keyword groups for diagnosis codes."""

    @pytest.mark.parametrize("query", ["diabetes", "Diabetic foot", "DIABETES type 2"])
    def test_diabetes_keywords_yield_three_codes(
        self, kb: FallbackKnowledgeBase, query: str
    ) -> None:
        codes = kb.diagnosis_codes(query)
        assert [c.code for c in codes] == ["E11.9", "E11.21", "E11.22"]
        assert all(
            c.category == "Endocrine, nutritional and metabolic diseases" for c in codes
        )

    @pytest.mark.parametrize("query", ["retinopathy", "eye exam", "retinal scan"])
    def test_retinopathy_keywords(self, kb: FallbackKnowledgeBase, query: str) -> None:
        codes = kb.diagnosis_codes(query)
        assert [c.code for c in codes] == [
            "H35.00",
            "H35.01",
            "H35.02",
            "H35.03",
            "H35.04",
        ]
        assert codes[0].description == "Unspecified background retinopathy"

    def test_hypertension_keyword(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.diagnosis_codes("Hypertension")
        assert [c.code for c in codes] == ["I10", "I11.9", "I12.9"]
        assert codes[0].description == "Essential (primary) hypertension"
        assert codes[0].category == "Diseases of the circulatory system"

    def test_query_matching_several_groups_concatenates_in_order(
        self, kb: FallbackKnowledgeBase
    ) -> None:
        codes = kb.diagnosis_codes("diabetic retinopathy")
        assert [c.code for c in codes][:3] == ["E11.9", "E11.21", "E11.22"]
        assert [c.code for c in codes][3:] == [
            "H35.00",
            "H35.01",
            "H35.02",
            "H35.03",
            "H35.04",
        ]

    def test_no_keyword_yields_empty(self, kb: FallbackKnowledgeBase) -> None:
        assert kb.diagnosis_codes("fractured femur") == []

    def test_results_are_deterministic(self, kb: FallbackKnowledgeBase) -> None:
        assert kb.diagnosis_codes("diabetes") == kb.diagnosis_codes("diabetes")


class TestProcedureFallback:
    """Keyword groups for CPT and HCPCS codes."""

    def test_retinal_imaging(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.procedure_codes("retinal imaging")
        assert [c.code for c in codes] == ["92250", "92227", "92228", "92229"]
        assert codes[0].modifiers == ["26", "TC"]
        assert codes[0].relative_value_units == pytest.approx(1.17)

    def test_diabetes_management(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.procedure_codes("diabetes management")
        assert [c.code for c in codes] == ["99213", "99214", "95251"]

    def test_laboratory(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.procedure_codes("Lab work")
        assert [c.code for c in codes] == ["83036", "80053", "80061"]
        assert codes[0].category == "Pathology and Laboratory"

    def test_unknown_procedure_yields_empty(self, kb: FallbackKnowledgeBase) -> None:
        assert kb.procedure_codes("appendectomy") == []

    def test_hcpcs_vaccines(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.hcpcs_codes("flu vaccine")
        assert [c.code for c in codes] == ["G0008", "G0009", "G0010"]
        assert all(c.category == "HCPCS Level II" for c in codes)

    def test_hcpcs_diabetes_training(self, kb: FallbackKnowledgeBase) -> None:
        assert [c.code for c in kb.hcpcs_codes("diabetes")] == ["G0108", "G0109"]


class TestDrugAndLabFallback:
    """Keyword groups for insulin J-codes and laboratory panels."""

    def test_insulin_returns_every_j_code(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.drug_codes("insulin")
        assert len(codes) == 10
        assert codes[0].code == "J1817"
        assert all(c.code.startswith("J18") for c in codes)

    def test_named_insulin_listed_first(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.drug_codes("Insulin glargine")
        assert [c.code for c in codes][:2] == ["J1818", "J1845"]
        assert len(codes) == 10

    def test_brand_name(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.drug_codes("Tresiba pen")
        assert [c.code for c in codes] == ["J1844", "J1848"]
        assert codes[0].description == "Insulin degludec, 100 units"

    def test_unknown_drug_yields_empty(self, kb: FallbackKnowledgeBase) -> None:
        assert kb.drug_codes("metformin") == []

    def test_lipid_panel(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.lab_codes("lipid panel")
        assert [c.code for c in codes] == ["80061"]
        assert codes[0].category == "Pathology and Laboratory"

    def test_metabolic_panels(self, kb: FallbackKnowledgeBase) -> None:
        assert [c.code for c in kb.lab_codes("CMP")] == ["80048", "80053"]

    def test_several_lab_groups(self, kb: FallbackKnowledgeBase) -> None:
        codes = kb.lab_codes("kidney and liver")
        assert [c.code for c in codes] == ["80069", "80074", "80076"]


class TestTerminologyFallback:
    """Substring matching for terminology abbreviations and synonyms."""

    @pytest.mark.parametrize(
        ("query", "term"),
        [
            ("OD", "OD"),
            ("os", "OS"),
            ("what does OU mean", "OU"),
            ("pcp", "PCP"),
            ("HEDIS measures", "HEDIS"),
        ],
    )
    def test_abbreviation_lookup(
        self, kb: FallbackKnowledgeBase, query: str, term: str
    ) -> None:
        entries = kb.terminology(query)
        assert [e.term for e in entries] == [term]

    def test_definition_and_category(self, kb: FallbackKnowledgeBase) -> None:
        (entry,) = kb.terminology("od")
        assert entry.definition == "Oculus Dexter - Right Eye"
        assert entry.category == "Ophthalmology"
        assert entry.related_terms == frozenset({"OS", "OU"})

    def test_synonym_lookup(self, kb: FallbackKnowledgeBase) -> None:
        assert [e.term for e in kb.terminology("left eye")] == ["OS"]

    @pytest.mark.parametrize(
        ("query", "term"),
        [("odexam", "OD"), ("pcps", "PCP"), ("blood", "OD")],
    )
    def test_abbreviation_matches_as_substring(
        self, kb: FallbackKnowledgeBase, query: str, term: str
    ) -> None:
        assert [e.term for e in kb.terminology(query)] == [term]

    def test_unrelated_query_matches_nothing(self, kb: FallbackKnowledgeBase) -> None:
        assert kb.terminology("tachycardia") == []

    def test_several_terms_in_one_query(self, kb: FallbackKnowledgeBase) -> None:
        assert [e.term for e in kb.terminology("OD vs OS")] == ["OD", "OS"]


class TestSampleProviders:
    def test_sample_directory_is_fixed(self, kb: FallbackKnowledgeBase) -> None:
        providers = kb.sample_providers()
        assert [p.identifier for p in providers] == ["1234567890", "0987654321"]
        assert providers[0].display_name == "Dr. Sarah Johnson"
        assert providers[1].specialty == "Ophthalmology"

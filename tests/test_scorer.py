"""Tests for relevance scoring."""

import math

import pytest

from pharma_kg.errors import ValidationError
from pharma_kg.scoring import DEFAULT_WEIGHTS, RelevanceCategory, RelevanceScorer, ScoringWeights, TrialRecord
from pharma_kg.scoring.tables import normalize_phase, normalize_status


@pytest.fixture
def scorer(seed_graph):
    return RelevanceScorer(seed_graph)


def record(**fields):
    data = {"interventions": [], "conditions": [], "phases": [], "status": "", "sponsorName": ""}
    data.update(fields)
    return data


def factor_scores(result):
    return {f.factor: f.score for f in result.factors}


class TestWeights:
    """Tests for factor weights."""

    def test_sum_to_one(self):
        assert math.fsum(DEFAULT_WEIGHTS.as_tuple()) == 1.0
        assert DEFAULT_WEIGHTS.as_tuple() == (0.30, 0.25, 0.20, 0.15, 0.10)

    def test_invalid_weights(self):
        with pytest.raises(ValidationError):
            ScoringWeights(drug=0.5)


class TestScore:
    """Tests for RelevanceScorer.score."""

    def test_worked_example(self, scorer):
        """Test 100x0.30 + 50x0.25 + 50x0.20 + 50x0.15 + 80x0.10 = 68."""
        result = scorer.score(
            record(interventions=["aspirin"], sponsorName="Pfizer"),
            {"primaryDrug": "aspirin", "intent": "general"},
        )
        assert result.score == 68
        assert result.category == RelevanceCategory.RELEVANT
        assert factor_scores(result) == {
            "drug": 100,
            "indication": 50,
            "phase": 50,
            "status": 50,
            "sponsor": 80,
        }
        assert result.explanation.startswith("This study has good relevance to your query.")
        assert "Direct match with aspirin" in result.explanation

    def test_competitive_landscape(self, scorer):
        """Test a competitor trial scored for competitive analysis."""
        result = scorer.score(
            record(
                interventions=["Nivolumab"],
                conditions=["Non-small cell lung cancer"],
                phases=["PHASE3"],
                status="RECRUITING",
                sponsorName="Bristol-Myers Squibb",
            ),
            {"primaryDrug": "Keytruda", "primaryIndication": "NSCLC", "intent": "competitive_analysis"},
        )
        assert factor_scores(result) == {
            "drug": 70,
            "indication": 100,
            "phase": 90,
            "status": 90,
            "sponsor": 80,
        }
        assert result.score == 86
        assert result.category == RelevanceCategory.HIGHLY_RELEVANT

    def test_range(self, scorer):
        """Test that scores stay within [0, 100]."""
        records = [
            record(),
            record(interventions=["Keytruda"], conditions=["NSCLC"], phases=["PHASE4"],
                   status="COMPLETED", sponsorName="Merck"),
            record(interventions=["Placebo"], conditions=["Gout"], status="WITHDRAWN"),
        ]
        contexts = [
            {},
            {"primaryDrug": "Pembrolizumab", "primaryIndication": "NSCLC", "intent": "safety_monitoring",
             "userCompany": "Merck"},
            {"primaryDrug": "Aspirin", "primaryIndication": "Hypertension", "intent": "market_research"},
        ]
        for rec in records:
            for ctx in contexts:
                assert 0 <= scorer.score(rec, ctx).score <= 100

    def test_deterministic(self, scorer):
        rec = record(interventions=["Ozempic"], conditions=["Obesity"], phases=["PHASE3"])
        ctx = {"primaryDrug": "Semaglutide", "primaryIndication": "T2DM", "intent": "market_research"}
        assert scorer.score(rec, ctx).to_dict() == scorer.score(rec, ctx).to_dict()


class TestDrugFactor:
    """Tests for the drug/intervention factor."""

    def test_no_primary_drug(self, scorer):
        assert factor_scores(scorer.score(record(interventions=["Aspirin"])))["drug"] == 50

    def test_alias_match_in_title(self, scorer):
        result = scorer.score(
            record(title="A Study of MK-3475 in Advanced Melanoma"), {"primaryDrug": "Pembrolizumab"}
        )
        assert factor_scores(result)["drug"] == 100

    def test_whole_word_only(self, scorer):
        """Test that 'ASA' does not match inside 'Basal'."""
        result = scorer.score(record(interventions=["Basal insulin"]), {"primaryDrug": "Aspirin"})
        assert factor_scores(result)["drug"] == 20

    def test_mechanism_text(self, scorer):
        result = scorer.score(
            record(interventions=["Cemiplimab (PD-1 inhibitor)"]), {"primaryDrug": "Pembrolizumab"}
        )
        assert factor_scores(result)["drug"] == 50

    def test_mechanism_of_resolved_intervention(self, scorer):
        """Test a different drug sharing the primary drug's mechanism."""
        result = scorer.score(record(interventions=["Aspirin 81 mg", "Aspirin"]), {"primaryDrug": "Naproxen"})
        assert factor_scores(result)["drug"] == 50

    def test_unrelated(self, scorer):
        result = scorer.score(record(interventions=["Pembrolizumab"]), {"primaryDrug": "Aspirin"})
        assert factor_scores(result)["drug"] == 20

    def test_unknown_primary_drug(self, scorer):
        """Test literal matching when the primary drug is not in the graph."""
        assert factor_scores(
            scorer.score(record(interventions=["Zorblax 10 mg"]), {"primaryDrug": "Zorblax"})
        )["drug"] == 100
        assert factor_scores(
            scorer.score(record(interventions=["Placebo"]), {"primaryDrug": "Zorblax"})
        )["drug"] == 20


class TestIndicationFactor:
    """Tests for the indication/condition factor."""

    def test_synonym_match(self, scorer):
        result = scorer.score(record(conditions=["Diabetes Mellitus, Type 2"]), {"primaryIndication": "T2D"})
        assert factor_scores(result)["indication"] == 100

    def test_related_condition(self, scorer):
        result = scorer.score(record(conditions=["Obesity"]), {"primaryIndication": "Type 2 Diabetes"})
        assert factor_scores(result)["indication"] == 60

    def test_same_therapeutic_area(self, scorer):
        result = scorer.score(record(conditions=["Melanoma"]), {"primaryIndication": "NSCLC"})
        assert factor_scores(result)["indication"] == 40

    def test_unrelated(self, scorer):
        result = scorer.score(record(conditions=["Hypertension"]), {"primaryIndication": "NSCLC"})
        assert factor_scores(result)["indication"] == 10

    def test_no_primary_indication(self, scorer):
        assert factor_scores(scorer.score(record(conditions=["Pain"])))["indication"] == 50


class TestPhaseAndStatus:
    """Tests for the table-driven phase and status factors."""

    def test_normalisation(self):
        assert normalize_phase("Phase 3") == "PHASE3"
        assert normalize_phase("phase_4") == "PHASE4"
        assert normalize_status("Active, not recruiting") == "ACTIVE_NOT_RECRUITING"

    def test_best_phase_wins(self, scorer):
        result = scorer.score(record(phases=["PHASE1", "PHASE2"]), {"intent": "competitive_analysis"})
        assert factor_scores(result)["phase"] == 70

    def test_safety_phase_four(self, scorer):
        result = scorer.score(record(phases=["Phase 4"]), {"intent": "safety_monitoring"})
        assert factor_scores(result)["phase"] == 100

    def test_status_lookup(self, scorer):
        result = scorer.score(record(status="Active, not recruiting"), {"intent": "competitive_analysis"})
        assert factor_scores(result)["status"] == 90
        result = scorer.score(record(status="TERMINATED"), {"intent": "safety_monitoring"})
        assert factor_scores(result)["status"] == 90

    def test_unmatched_defaults_to_neutral(self, scorer):
        result = scorer.score(record(phases=["PHASE3"], status="RECRUITING"), {"intent": "drug_development"})
        scores = factor_scores(result)
        assert scores["phase"] == 50
        assert scores["status"] == 50


class TestSponsorFactor:
    """Tests for the sponsor factor."""

    @pytest.mark.parametrize(
        "sponsor, expected",
        [
            ("Acme Bio Inc.", 100),
            ("Acme Biologics", 40),
            ("Merck Sharp & Dohme LLC", 80),
            ("National Cancer Institute (NCI)", 95),
            ("Stanford University", 60),
            ("Small Biotech LLC", 40),
        ],
    )
    def test_sponsor_tiers(self, scorer, sponsor, expected):
        result = scorer.score(record(sponsorName=sponsor), {"userCompany": "Acme Bio"})
        assert factor_scores(result)["sponsor"] == expected


class TestScoreAll:
    """Tests for RelevanceScorer.score_all."""

    def test_stable_descending(self, scorer):
        """Test that equal scores keep their input order."""
        ctx = {"primaryDrug": "Aspirin"}
        records = [
            record(nctId="NCT1", interventions=["Placebo"]),
            record(nctId="NCT2", interventions=["Aspirin"]),
            record(nctId="NCT3", interventions=["Saline"]),
            record(nctId="NCT4", interventions=["ASA"]),
            record(nctId="NCT5", interventions=["Water"]),
        ]
        ranked = scorer.score_all(records, ctx)
        assert [r.record.nct_id for r in ranked] == ["NCT2", "NCT4", "NCT1", "NCT3", "NCT5"]
        scores = [r.score for r in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_identical_records_keep_order(self, scorer):
        records = [record(nctId=f"NCT{i}") for i in range(10)]
        ranked = scorer.score_all(records)
        assert [r.record.nct_id for r in ranked] == [f"NCT{i}" for i in range(10)]

    def test_study_documents(self, scorer):
        """Test scoring raw ClinicalTrials.gov study documents."""
        study = {
            "protocolSection": {
                "identificationModule": {"nctId": "NCT00000001", "briefTitle": "Semaglutide in Obesity"},
                "statusModule": {"overallStatus": "COMPLETED"},
                "conditionsModule": {"conditions": ["Obesity"]},
                "designModule": {"phases": ["PHASE3"]},
                "sponsorCollaboratorsModule": {"leadSponsor": {"name": "Novo Nordisk A/S"}},
            }
        }
        ranked = scorer.score_all([study], {"primaryDrug": "Ozempic", "primaryIndication": "Obesity"})
        assert ranked[0].record.nct_id == "NCT00000001"
        assert ranked[0].record.interventions == []
        assert factor_scores(ranked[0].relevance_score)["drug"] == 100
        assert ranked[0].to_dict()["relevanceScore"]["score"] == ranked[0].score

    def test_invalid_record(self, scorer):
        with pytest.raises(ValidationError):
            scorer.score_all([{"interventions": "Aspirin"}])

    def test_trial_record_aliases(self):
        rec = TrialRecord(sponsor_name="Pfizer", nct_id="NCT9")
        assert rec.to_dict()["sponsorName"] == "Pfizer"
        assert rec.to_dict()["nctId"] == "NCT9"

"""Unit tests for the rule-based risk engine.

Covers the three condition predictors, BMI, level classification, and the
orchestrator's totality / ordering guarantees.
"""

from __future__ import annotations

import math

import pytest

from oracle_health.domains.health.domain_logic.risk_engine import (
    calculate_bmi,
    classify_risk_level,
    predict_cardiovascular,
    predict_diabetes,
    predict_hypertension,
    predict_risks,
)
from oracle_health.domains.health.domain_logic.risk_models import (
    CARDIOVASCULAR,
    DIABETES,
    HYPERTENSION,
    TRACKED_CONDITIONS,
    VitalsSnapshot,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _vitals(systolic=115, diastolic=75, glucose=90, cholesterol=180, height=175, weight=70):
    return VitalsSnapshot(
        systolic_bp=systolic,
        diastolic_bp=diastolic,
        blood_glucose=glucose,
        cholesterol=cholesterol,
        height_cm=height,
        weight_kg=weight,
    )


def _by_disease(predictions):
    return {p.disease: p for p in predictions}


# ---------------------------------------------------------------------------
# BMI
# ---------------------------------------------------------------------------

class TestCalculateBmi:
    def test_standard_bmi(self):
        assert calculate_bmi(170, 78) == pytest.approx(26.99, abs=0.01)

    def test_zero_height_is_zero(self):
        assert calculate_bmi(0, 70) == 0.0

    def test_zero_weight_is_zero(self):
        assert calculate_bmi(170, 0) == 0.0

    def test_negative_inputs_are_zero(self):
        assert calculate_bmi(-170, 70) == 0.0
        assert calculate_bmi(170, -70) == 0.0

    def test_nan_height_is_zero(self):
        assert calculate_bmi(float("nan"), 70) == 0.0


# ---------------------------------------------------------------------------
# Level classification
# ---------------------------------------------------------------------------

class TestClassifyRiskLevel:
    @pytest.mark.parametrize(
        "score,level",
        [
            (0.0, "Low"),
            (0.24, "Low"),
            (0.25, "Medium"),
            (0.49, "Medium"),
            (0.5, "High"),
            (0.74, "High"),
            (0.75, "Very High"),
            (1.0, "Very High"),
        ],
    )
    def test_thresholds(self, score, level):
        assert classify_risk_level(score) == level


# ---------------------------------------------------------------------------
# Diabetes
# ---------------------------------------------------------------------------

class TestDiabetes:
    def test_healthy_is_low(self):
        p = predict_diabetes(_vitals(), age=30, bmi=22)
        assert p.score == 0.0
        assert p.risk_level == "Low"
        assert p.factors == ()

    def test_prediabetic_glucose(self):
        p = predict_diabetes(_vitals(glucose=110), age=30, bmi=22)
        assert p.score == pytest.approx(0.25)
        assert p.factors == ("Elevated fasting blood glucose (pre-diabetic range).",)

    def test_glucose_boundaries_are_strict(self):
        assert predict_diabetes(_vitals(glucose=100), age=30, bmi=22).score == 0.0
        assert predict_diabetes(_vitals(glucose=125), age=30, bmi=22).score == pytest.approx(0.25)

    def test_scenario_a(self):
        """glucose 130, BMI ~27, age 50 -> 0.5 + 0.15 + 0.15 = 0.8."""
        vitals = _vitals(glucose=130, height=170, weight=78)
        p = _by_disease(predict_risks(vitals, 50))[DIABETES]
        assert p.score == pytest.approx(0.8)
        assert p.risk_level == "Very High"
        assert p.factors == (
            "High fasting blood glucose level.",
            "Overweight (BMI > 25).",
            "Age over 45.",
        )

    def test_extreme_weight_stacks_and_clamps(self):
        vitals = _vitals(glucose=150, height=180, weight=320)
        p = predict_diabetes(vitals, age=60, bmi=calculate_bmi(180, 320))
        # 0.5 + 0.3 + 0.2 + 0.15 = 1.15 -> clamped
        assert p.score == 1.0
        assert p.risk_level == "Very High"
        assert "Extremely high body weight is a critical risk factor." in p.factors


# ---------------------------------------------------------------------------
# Cardiovascular
# ---------------------------------------------------------------------------

class TestCardiovascular:
    def test_borderline_cholesterol(self):
        p = predict_cardiovascular(_vitals(cholesterol=210), age=30, bmi=22)
        assert p.score == pytest.approx(0.2)
        assert p.factors == ("Borderline high cholesterol.",)

    def test_high_cholesterol_and_bp(self):
        p = predict_cardiovascular(_vitals(cholesterol=250, systolic=150), age=30, bmi=22)
        assert p.score == pytest.approx(0.7)
        assert p.risk_level == "High"

    def test_diastolic_alone_triggers_bp_rule(self):
        p = predict_cardiovascular(_vitals(diastolic=95), age=30, bmi=22)
        assert p.score == pytest.approx(0.3)
        assert "High blood pressure." in p.factors

    def test_bmi_and_age_share_one_factor(self):
        p = predict_cardiovascular(_vitals(), age=55, bmi=32)
        assert p.score == pytest.approx(0.3)
        assert p.factors == ("BMI and/or age are contributing factors.",)

    def test_age_only_emits_combined_factor(self):
        p = predict_cardiovascular(_vitals(), age=51, bmi=22)
        assert p.score == pytest.approx(0.15)
        assert p.factors == ("BMI and/or age are contributing factors.",)


# ---------------------------------------------------------------------------
# Hypertension
# ---------------------------------------------------------------------------

class TestHypertension:
    @pytest.mark.parametrize(
        "systolic,diastolic,expected",
        [
            (110, 70, 0.0),
            (120, 70, 0.25),
            (130, 70, 0.5),
            (115, 80, 0.5),
            (140, 70, 0.75),
            (115, 90, 0.75),
            (180, 70, 0.95),
            (115, 120, 0.95),
        ],
    )
    def test_stages(self, systolic, diastolic, expected):
        p = predict_hypertension(_vitals(systolic=systolic, diastolic=diastolic), age=30, bmi=22)
        assert p.score == pytest.approx(expected)

    def test_scenario_b(self):
        """185/95, BMI 22, age 40 -> crisis 0.95, no adjustments."""
        vitals = _vitals(systolic=185, diastolic=95, height=175, weight=67.4)
        p = _by_disease(predict_risks(vitals, 40))[HYPERTENSION]
        assert p.score == pytest.approx(0.95)
        assert p.risk_level == "Very High"
        assert p.factors == ("Hypertensive Crisis - consult a doctor immediately.",)

    def test_age_adjustment_requires_existing_risk(self):
        p = predict_hypertension(_vitals(systolic=110, diastolic=70), age=70, bmi=22)
        assert p.score == 0.0
        assert p.factors == ()

    def test_age_adjustment_on_elevated(self):
        p = predict_hypertension(_vitals(systolic=125, diastolic=70), age=65, bmi=22)
        assert p.score == pytest.approx(0.35)
        assert p.risk_level == "Medium"
        assert "Age is a contributing factor." in p.factors

    def test_obesity_applies_regardless_of_base(self):
        p = predict_hypertension(_vitals(systolic=110, diastolic=70), age=30, bmi=31)
        assert p.score == pytest.approx(0.15)
        assert p.factors == ("Obesity is a major contributing factor.",)

    def test_adjustments_clamp_at_one(self):
        p = predict_hypertension(_vitals(systolic=190, diastolic=100), age=70, bmi=35)
        assert p.score == 1.0

    def test_monotonic_in_systolic(self):
        previous = -1.0
        for systolic in range(60, 260, 5):
            score = predict_hypertension(_vitals(systolic=systolic), age=65, bmi=31).score
            assert score >= previous
            previous = score


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class TestPredictRisks:
    def test_fixed_order(self):
        predictions = predict_risks(_vitals(), 30)
        assert [p.disease for p in predictions] == TRACKED_CONDITIONS
        assert TRACKED_CONDITIONS == [DIABETES, CARDIOVASCULAR, HYPERTENSION]

    def test_scenario_d_zero_height(self):
        vitals = _vitals(height=0, weight=70)
        predictions = predict_risks(vitals, 30)
        assert len(predictions) == 3
        by_disease = _by_disease(predictions)
        assert "Obesity (BMI > 30)." not in by_disease[DIABETES].factors
        assert "Overweight (BMI > 25)." not in by_disease[DIABETES].factors
        assert by_disease[CARDIOVASCULAR].factors == ()
        assert by_disease[HYPERTENSION].factors == ()

    @pytest.mark.parametrize(
        "vitals,age",
        [
            (_vitals(systolic=0, diastolic=0, glucose=0, cholesterol=0, height=0, weight=0), 0),
            (_vitals(height=-5, weight=-80), 30),
            (_vitals(systolic=300, diastolic=200, glucose=600, cholesterol=500, weight=400), 120),
            (_vitals(height=float("inf")), 40),
            (_vitals(), float("nan")),
        ],
    )
    def test_total_and_consistent(self, vitals, age):
        predictions = predict_risks(vitals, age)
        assert len(predictions) == 3
        for p in predictions:
            assert 0.0 <= p.score <= 1.0
            assert not math.isnan(p.score)
            assert p.risk_level == classify_risk_level(p.score)

    def test_deterministic(self):
        vitals = _vitals(systolic=142, glucose=118, cholesterol=222, weight=95)
        assert predict_risks(vitals, 58) == predict_risks(vitals, 58)

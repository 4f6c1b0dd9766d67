"""Rule-based risk inference: vitals + age -> categorical disease risk.

Every predictor accumulates weighted evidence into a score, clamps it to
[0, 1] and derives the risk level from the clamped score.
All rules are deterministic and do no I/O.

This is a screening heuristic, not a diagnostic model.
"""

from __future__ import annotations

import math

from oracle_health.domains.health.domain_logic.risk_models import (
    CARDIOVASCULAR,
    DIABETES,
    HYPERTENSION,
    RISK_LEVEL_THRESHOLDS,
    RiskLevel,
    RiskPrediction,
    VitalsSnapshot,
)


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


def _finite(value, default: float = 0.0) -> float:
    """Coerce to a finite float, using ``default`` for None, NaN and infinities."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Body-mass index; 0 when height or weight is non-positive."""
    height_cm = _finite(height_cm)
    weight_kg = _finite(weight_kg)
    if height_cm <= 0 or weight_kg <= 0:
        return 0.0
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def classify_risk_level(score: float) -> RiskLevel:
    """Map a score to its risk bucket."""
    for lower_bound, level in RISK_LEVEL_THRESHOLDS:
        if score >= lower_bound:
            return level
    return "Low"


def _prediction(disease: str, score: float, factors: list[str]) -> RiskPrediction:
    score = _clamp(score)
    return RiskPrediction(
        disease=disease,
        score=score,
        risk_level=classify_risk_level(score),
        factors=tuple(factors),
    )


# ---------------------------------------------------------------------------
# Condition 1: Type 2 Diabetes
# ---------------------------------------------------------------------------

def predict_diabetes(vitals: VitalsSnapshot, age: float, bmi: float) -> RiskPrediction:
    score = 0.0
    factors: list[str] = []
    glucose = _finite(vitals.blood_glucose)

    if glucose > 125:
        score += 0.5
        factors.append("High fasting blood glucose level.")
    elif glucose > 100:
        score += 0.25
        factors.append("Elevated fasting blood glucose (pre-diabetic range).")

    if bmi > 30:
        score += 0.3
        factors.append("Obesity (BMI > 30).")
    elif bmi > 25:
        score += 0.15
        factors.append("Overweight (BMI > 25).")

    # Stacks with the BMI contribution
    if _finite(vitals.weight_kg) > 300:
        score += 0.2
        factors.append("Extremely high body weight is a critical risk factor.")

    if age > 45:
        score += 0.15
        factors.append("Age over 45.")

    return _prediction(DIABETES, score, factors)


# ---------------------------------------------------------------------------
# Condition 2: Cardiovascular Disease
# ---------------------------------------------------------------------------

def predict_cardiovascular(vitals: VitalsSnapshot, age: float, bmi: float) -> RiskPrediction:
    score = 0.0
    factors: list[str] = []
    cholesterol = _finite(vitals.cholesterol)

    if cholesterol > 240:
        score += 0.4
        factors.append("High total cholesterol.")
    elif cholesterol > 200:
        score += 0.2
        factors.append("Borderline high cholesterol.")

    if _finite(vitals.systolic_bp) > 140 or _finite(vitals.diastolic_bp) > 90:
        score += 0.3
        factors.append("High blood pressure.")

    if bmi > 30:
        score += 0.15
    if age > 50:
        score += 0.15
    if bmi > 30 or age > 50:
        factors.append("BMI and/or age are contributing factors.")

    return _prediction(CARDIOVASCULAR, score, factors)


# ---------------------------------------------------------------------------
# Condition 3: Hypertension
# ---------------------------------------------------------------------------

# (systolic floor, diastolic floor or None, base score, factor), most severe first.
# Stages are mutually exclusive: the first match sets the base score.
_HYPERTENSION_STAGES: list[tuple[float, float | None, float, str]] = [
    (180, 120, 0.95, "Hypertensive Crisis - consult a doctor immediately."),
    (140, 90, 0.75, "Stage 2 Hypertension."),
    (130, 80, 0.5, "Stage 1 Hypertension."),
    (120, None, 0.25, "Elevated blood pressure."),
]


def predict_hypertension(vitals: VitalsSnapshot, age: float, bmi: float) -> RiskPrediction:
    systolic = _finite(vitals.systolic_bp)
    diastolic = _finite(vitals.diastolic_bp)
    score = 0.0
    factors: list[str] = []

    for systolic_floor, diastolic_floor, stage_score, factor in _HYPERTENSION_STAGES:
        if systolic >= systolic_floor or (
            diastolic_floor is not None and diastolic >= diastolic_floor
        ):
            score = stage_score
            factors.append(factor)
            break

    if age > 60 and score > 0.1:
        score = _clamp(score + 0.1)
        factors.append("Age is a contributing factor.")

    if bmi > 30:
        score = _clamp(score + 0.15)
        factors.append("Obesity is a major contributing factor.")

    return _prediction(HYPERTENSION, score, factors)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def predict_risks(vitals: VitalsSnapshot, age: float) -> list[RiskPrediction]:
    """Score every tracked condition.

    Always returns exactly three predictions, in TRACKED_CONDITIONS order
    (diabetes, cardiovascular, hypertension). Never raises: zero or negative
    height/weight yield a BMI of 0 so the BMI rules simply do not fire.
    """
    age = _finite(age)
    bmi = calculate_bmi(vitals.height_cm, vitals.weight_kg)
    return [
        predict_diabetes(vitals, age, bmi),
        predict_cardiovascular(vitals, age, bmi),
        predict_hypertension(vitals, age, bmi),
    ]

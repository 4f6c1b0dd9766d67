"""Vitals, profile and risk prediction models plus domain constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

DIABETES = "Type 2 Diabetes"
CARDIOVASCULAR = "Cardiovascular Disease"
HYPERTENSION = "Hypertension"

# Fixed output order of predict_risks()
TRACKED_CONDITIONS = [DIABETES, CARDIOVASCULAR, HYPERTENSION]

RiskLevel = Literal["Low", "Medium", "High", "Very High"]

# Lower bound of each bucket, highest first
RISK_LEVEL_THRESHOLDS: list[tuple[float, RiskLevel]] = [
    (0.75, "Very High"),
    (0.5, "High"),
    (0.25, "Medium"),
]

POPULATION_AVERAGES = {
    "systolic_bp": 125,
    "diastolic_bp": 82,
    "blood_glucose": 100,
    "cholesterol": 210,
    "bmi": 26.5,
}

DISEASE_INFO: dict[str, dict[str, Any]] = {
    DIABETES: {
        "description": (
            "A chronic condition that affects how your body metabolizes sugar "
            "(glucose). Your body either resists the effects of insulin or doesn't "
            "produce enough insulin to maintain normal glucose levels."
        ),
        "prevention": [
            "Maintain a healthy weight through a balanced diet and regular exercise.",
            "Eat a diet rich in whole grains, fruits, and vegetables.",
            "Limit intake of sugary drinks and processed foods.",
            "Get at least 150 minutes of moderate aerobic exercise per week.",
        ],
    },
    CARDIOVASCULAR: {
        "description": (
            "A range of conditions affecting the heart and blood vessels, usually "
            "associated with a build-up of fatty deposits inside the arteries and an "
            "increased risk of blood clots."
        ),
        "prevention": [
            "Maintain healthy blood pressure and cholesterol levels.",
            "Do not smoke and avoid secondhand smoke.",
            "Engage in regular physical activity.",
            "Eat a heart-healthy diet low in saturated fats, trans fats, and sodium.",
        ],
    },
    HYPERTENSION: {
        "description": (
            "Also known as high blood pressure: the pressure in the arteries is "
            "persistently elevated. It is a major risk factor for coronary artery "
            "disease, stroke, and heart failure."
        ),
        "prevention": [
            "Reduce salt intake.",
            "Limit alcohol consumption.",
            "Eat a diet rich in fruits, vegetables, and low-fat dairy products.",
            "Regularly monitor your blood pressure.",
        ],
    },
}


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VitalsSnapshot:
    """One set of self-reported measurements."""

    systolic_bp: float       # mmHg
    diastolic_bp: float      # mmHg
    blood_glucose: float     # mg/dL
    cholesterol: float       # mg/dL
    height_cm: float
    weight_kg: float

    @property
    def is_valid(self) -> bool:
        """True when every field is positive (scoring still works otherwise)."""
        return all(v > 0 for v in self.to_dict().values())

    def to_dict(self) -> dict[str, float]:
        return {
            "systolic_bp": self.systolic_bp,
            "diastolic_bp": self.diastolic_bp,
            "blood_glucose": self.blood_glucose,
            "cholesterol": self.cholesterol,
            "height_cm": self.height_cm,
            "weight_kg": self.weight_kg,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VitalsSnapshot:
        return cls(
            systolic_bp=data.get("systolic_bp", 0),
            diastolic_bp=data.get("diastolic_bp", 0),
            blood_glucose=data.get("blood_glucose", 0),
            cholesterol=data.get("cholesterol", 0),
            height_cm=data.get("height_cm", 0),
            weight_kg=data.get("weight_kg", 0),
        )


@dataclass(frozen=True)
class Profile:
    """User attributes. Only ``age`` is read by the risk engine.

    ``extra`` carries opaque context (allergies, genetic markers, notes) that
    is forwarded to the AI analysis untouched.
    """

    age: int = 0
    name: str = ""
    gender: str = ""
    country: str = ""
    city: str = ""
    extra: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "age": self.age,
            "name": self.name,
            "gender": self.gender,
            "country": self.country,
            "city": self.city,
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(
            age=int(data.get("age", 0) or 0),
            name=data.get("name", ""),
            gender=data.get("gender", ""),
            country=data.get("country", ""),
            city=data.get("city", ""),
            extra=dict(data.get("extra") or {}),
        )


@dataclass(frozen=True)
class RiskPrediction:
    """Categorical risk estimate for one tracked condition."""

    disease: str
    score: float               # clamped to [0, 1]
    risk_level: RiskLevel
    factors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "disease": self.disease,
            "score": self.score,
            "risk_level": self.risk_level,
            "factors": list(self.factors),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RiskPrediction:
        return cls(
            disease=data["disease"],
            score=data["score"],
            risk_level=data["risk_level"],
            factors=tuple(data.get("factors", ())),
        )


@dataclass
class HealthRecord:
    """A persisted health check: vitals, risk predictions and AI guidance."""

    id: str
    date: str  # ISO 8601
    vitals: VitalsSnapshot
    bmi: float
    predictions: list[RiskPrediction]
    recommendations: str = ""
    recommendations_fallback: bool = False

    def score_for(self, disease: str) -> float | None:
        for prediction in self.predictions:
            if prediction.disease == disease:
                return prediction.score
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "vitals": self.vitals.to_dict(),
            "bmi": round(self.bmi, 1),
            "predictions": [p.to_dict() for p in self.predictions],
            "recommendations": self.recommendations,
            "recommendations_fallback": self.recommendations_fallback,
        }

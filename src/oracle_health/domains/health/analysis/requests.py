"""Typed request schema for AI analysis calls.

Each request kind is a frozen dataclass with a stable ``kind`` tag and a
``payload()`` containing exactly the inputs that shape the response. The
cache fingerprint is derived from that payload, so requests that would
produce the same answer share a cache entry and different ones never
collide.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Union, get_args

from oracle_health.core.resilience import policy
from oracle_health.domains.health.domain_logic.risk_engine import calculate_bmi
from oracle_health.domains.health.domain_logic.risk_models import (
    HealthRecord,
    Profile,
    RiskPrediction,
    VitalsSnapshot,
)

CoachPersonality = Literal[
    "Empathetic & Encouraging",
    "Direct & Data-Driven",
    "Calm & Reassuring",
    "Energetic & Motivational",
]

COACH_PERSONALITIES: tuple[str, ...] = get_args(CoachPersonality)

# Chat context sent to the model is bounded to the most recent turns
CHAT_HISTORY_TURNS = 5


@dataclass(frozen=True)
class CoachSettings:
    name: str = "Oracle"
    personality: CoachPersonality = "Empathetic & Encouraging"


@dataclass(frozen=True)
class ChatTurn:
    sender: Literal["user", "bot"]
    text: str


@dataclass(frozen=True)
class HealthAnalysisRequest:
    """Recommendations for one health check."""

    kind: ClassVar[str] = policy.HEALTH_ANALYSIS

    vitals: VitalsSnapshot
    profile: Profile
    predictions: tuple[RiskPrediction, ...]

    @property
    def bmi(self) -> float:
        return calculate_bmi(self.vitals.height_cm, self.vitals.weight_kg)

    def payload(self) -> dict[str, Any]:
        return {
            "vitals": self.vitals.to_dict(),
            "profile": self.profile.to_dict(),
            "predictions": [
                {"disease": p.disease, "risk_level": p.risk_level} for p in self.predictions
            ],
        }


@dataclass(frozen=True)
class ProgressAnalysisRequest:
    """Narrative over a series of past health checks."""

    kind: ClassVar[str] = policy.PROGRESS_ANALYSIS

    records: tuple[HealthRecord, ...]
    profile: Profile

    def payload(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "records": [
                {
                    "date": record.date,
                    "vitals": record.vitals.to_dict(),
                    "risk_levels": {p.disease: p.risk_level for p in record.predictions},
                }
                for record in self.records
            ],
        }


@dataclass(frozen=True)
class CompanionChatRequest:
    kind: ClassVar[str] = policy.COMPANION_CHAT

    message: str
    history: tuple[ChatTurn, ...] = ()
    coach: CoachSettings = field(default_factory=CoachSettings)

    @property
    def recent_history(self) -> tuple[ChatTurn, ...]:
        return self.history[-CHAT_HISTORY_TURNS:]

    def payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "history": [[turn.sender, turn.text] for turn in self.recent_history],
            "coach": {"name": self.coach.name, "personality": self.coach.personality},
        }


@dataclass(frozen=True)
class TrendingDiseasesRequest:
    kind: ClassVar[str] = policy.TRENDING_DISEASES

    country: str
    city: str

    def payload(self) -> dict[str, Any]:
        return {"country": self.country, "city": self.city}


@dataclass(frozen=True)
class GlobalTrendingDiseasesRequest:
    kind: ClassVar[str] = policy.GLOBAL_TRENDING_DISEASES

    country: str

    def payload(self) -> dict[str, Any]:
        return {"country": self.country}


@dataclass(frozen=True)
class DiseaseFactSheetRequest:
    kind: ClassVar[str] = policy.DISEASE_FACT_SHEET

    disease: str

    def payload(self) -> dict[str, Any]:
        return {"disease": self.disease.strip().lower()}


@dataclass(frozen=True)
class CityLiveFeedRequest:
    """Recent simulated outbreak reports for a city (polled)."""

    kind: ClassVar[str] = policy.CITY_LIVE_FEED

    city: str

    def payload(self) -> dict[str, Any]:
        return {"city": self.city.strip()}


@dataclass(frozen=True)
class DiseaseStatsRequest:
    """Search result for one disease: case counts, symptoms, drugs, guidance."""

    kind: ClassVar[str] = policy.DISEASE_STATS

    disease: str
    country: str = ""

    def payload(self) -> dict[str, Any]:
        return {"disease": self.disease.strip().lower(), "country": self.country}


AnalysisRequest = Union[
    HealthAnalysisRequest,
    ProgressAnalysisRequest,
    CompanionChatRequest,
    TrendingDiseasesRequest,
    GlobalTrendingDiseasesRequest,
    DiseaseFactSheetRequest,
    CityLiveFeedRequest,
    DiseaseStatsRequest,
]


def canonical_payload(request: AnalysisRequest) -> str:
    """Canonical JSON of the request (tag included, sorted keys)."""
    return json.dumps(
        {"kind": request.kind, "payload": request.payload()},
        sort_keys=True,
        separators=(",", ":"),
    )


def fingerprint(request: AnalysisRequest) -> str:
    """Stable cache key: ``<kind>:<sha256 of canonical payload>``."""
    digest = hashlib.sha256(canonical_payload(request).encode("utf-8")).hexdigest()
    return f"{request.kind}:{digest}"

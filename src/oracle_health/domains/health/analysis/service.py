"""AI analysis service: every remote AI call behind the resilience layer.

Each public method builds a typed request, fingerprints it, and hands the
remote call plus a static fallback to ``ResilientCaller.guarded``. The
``*_detailed`` variants expose whether the answer is a fallback; the plain
variants return just the value.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Literal, Sequence, get_args

from oracle_health.core.llm.client import HealthLLMClient
from oracle_health.core.llm.response import enforce_disclaimer
from oracle_health.core.resilience.caller import ResilientCaller, ResilientResult
from oracle_health.domains.health.analysis import fallbacks
from oracle_health.domains.health.analysis.requests import (
    ChatTurn,
    CityLiveFeedRequest,
    CoachSettings,
    CompanionChatRequest,
    DiseaseFactSheetRequest,
    DiseaseStatsRequest,
    GlobalTrendingDiseasesRequest,
    HealthAnalysisRequest,
    ProgressAnalysisRequest,
    TrendingDiseasesRequest,
    fingerprint,
)
from oracle_health.domains.health.domain_logic.risk_models import (
    HealthRecord,
    Profile,
    RiskPrediction,
    VitalsSnapshot,
)
from oracle_health.domains.health.prompts import analysis_prompts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendingDisease:
    name: str
    cases: int
    prevention: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrendingDisease:
        return cls(name=str(data["name"]), cases=int(data["cases"]), prevention=str(data["prevention"]))


@dataclass(frozen=True)
class GlobalDiseaseStat:
    name: str
    global_cases: int
    country_cases: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GlobalDiseaseStat:
        return cls(
            name=str(data["name"]),
            global_cases=int(data["global_cases"]),
            country_cases=int(data["country_cases"]),
        )


FeedSeverity = Literal["Mild", "Moderate", "Severe"]
_SEVERITIES: tuple[str, ...] = get_args(FeedSeverity)


@dataclass(frozen=True)
class CityFeedEvent:
    """One simulated outbreak report in the live city feed."""

    id: str
    disease: str
    area: str
    severity: FeedSeverity
    time: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CityFeedEvent:
        severity = str(data["severity"]).strip().capitalize()
        if severity not in _SEVERITIES:
            raise ValueError(f"Unknown feed severity: {data['severity']!r}")
        return cls(
            id=str(data["id"]),
            disease=str(data["disease"]),
            area=str(data["area"]),
            severity=severity,
            time=str(data["time"]),
        )


@dataclass(frozen=True)
class DiseaseStats:
    disease_name: str
    total_global_cases: int
    symptoms: tuple[str, ...]
    recognized_drugs: tuple[str, ...]
    prevention: tuple[str, ...]
    treatment: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiseaseStats:
        def _strings(key: str) -> tuple[str, ...]:
            value = data.get(key) or []
            if not isinstance(value, list):
                raise ValueError(f"{key} must be a list")
            return tuple(str(item) for item in value)

        return cls(
            disease_name=str(data["disease_name"]),
            total_global_cases=int(data["total_global_cases"]),
            symptoms=_strings("symptoms"),
            recognized_drugs=_strings("recognized_drugs"),
            prevention=_strings("prevention"),
            treatment=_strings("treatment"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "disease_name": self.disease_name,
            "total_global_cases": self.total_global_cases,
            "symptoms": list(self.symptoms),
            "recognized_drugs": list(self.recognized_drugs),
            "prevention": list(self.prevention),
            "treatment": list(self.treatment),
        }


class HealthAIService:
    """Natural-language guidance from the AI service, never failing outward.

    Usage::

        service = HealthAIService(HealthLLMClient(provider), ResilientCaller())
        text = await service.health_analysis(vitals, profile, predictions)
    """

    def __init__(self, llm_client: HealthLLMClient, caller: ResilientCaller) -> None:
        self.llm_client = llm_client
        self.caller = caller

    # ------------------------------------------------------------------
    # Health check recommendations
    # ------------------------------------------------------------------

    async def health_analysis_detailed(
        self,
        vitals: VitalsSnapshot,
        profile: Profile,
        predictions: Sequence[RiskPrediction],
    ) -> ResilientResult[str]:
        request = HealthAnalysisRequest(vitals, profile, tuple(predictions))
        instructions, message = analysis_prompts.health_analysis_prompt(request)

        async def _call() -> str:
            text = await self.llm_client.complete(
                instructions, message, max_tokens=600, temperature=0.5
            )
            return enforce_disclaimer(text)

        return await self.caller.guarded(
            request.kind, fingerprint(request), _call, fallbacks.HEALTH_ANALYSIS_FALLBACK
        )

    async def health_analysis(
        self,
        vitals: VitalsSnapshot,
        profile: Profile,
        predictions: Sequence[RiskPrediction],
    ) -> str:
        result = await self.health_analysis_detailed(vitals, profile, predictions)
        return result.value

    # ------------------------------------------------------------------
    # Progress over stored history
    # ------------------------------------------------------------------

    async def progress_analysis_detailed(
        self, records: Sequence[HealthRecord], profile: Profile
    ) -> ResilientResult[str]:
        """Trend narrative over ``records`` (oldest first, at least two).

        Raises:
            ValueError: If fewer than two records are given.
        """
        if len(records) < 2:
            raise ValueError("Progress analysis needs at least 2 health records")

        request = ProgressAnalysisRequest(tuple(records), profile)
        logger.debug("Progress analysis over %d records", len(records))
        instructions, message = analysis_prompts.progress_analysis_prompt(request)

        async def _call() -> str:
            text = await self.llm_client.complete(instructions, message, max_tokens=500)
            return enforce_disclaimer(text)

        return await self.caller.guarded(
            request.kind, fingerprint(request), _call, fallbacks.PROGRESS_ANALYSIS_FALLBACK
        )

    async def progress_analysis(self, records: Sequence[HealthRecord], profile: Profile) -> str:
        result = await self.progress_analysis_detailed(records, profile)
        return result.value

    # ------------------------------------------------------------------
    # Companion chat
    # ------------------------------------------------------------------

    async def companion_reply(
        self,
        message: str,
        history: Sequence[ChatTurn] = (),
        coach: CoachSettings | None = None,
    ) -> ResilientResult[str]:
        request = CompanionChatRequest(message, tuple(history), coach or CoachSettings())
        instructions, prompt = analysis_prompts.companion_chat_prompt(request)

        async def _call() -> str:
            return await self.llm_client.complete(
                instructions, prompt, max_tokens=300, temperature=0.7
            )

        return await self.caller.guarded(
            request.kind, fingerprint(request), _call, fallbacks.COMPANION_CHAT_FALLBACK
        )

    # ------------------------------------------------------------------
    # Community feeds
    # ------------------------------------------------------------------

    async def trending_diseases(self, country: str, city: str) -> list[TrendingDisease]:
        request = TrendingDiseasesRequest(country=country, city=city)
        instructions, message = analysis_prompts.trending_diseases_prompt(request)

        async def _call() -> list[dict[str, Any]]:
            items = await self.llm_client.complete_json_list(
                instructions, message, required_keys=("name", "cases", "prevention")
            )
            # Validate before caching so a malformed item is treated as a failure
            return [asdict(TrendingDisease.from_dict(item)) for item in items]

        result = await self.caller.guarded(
            request.kind, fingerprint(request), _call, fallbacks.TRENDING_DISEASES_FALLBACK
        )
        return [TrendingDisease.from_dict(item) for item in result.value]

    async def global_trending_diseases(self, country: str) -> list[GlobalDiseaseStat]:
        request = GlobalTrendingDiseasesRequest(country=country)
        instructions, message = analysis_prompts.global_trending_diseases_prompt(request)

        async def _call() -> list[dict[str, Any]]:
            items = await self.llm_client.complete_json_list(
                instructions, message, required_keys=("name", "global_cases", "country_cases")
            )
            return [asdict(GlobalDiseaseStat.from_dict(item)) for item in items]

        result = await self.caller.guarded(
            request.kind,
            fingerprint(request),
            _call,
            fallbacks.GLOBAL_TRENDING_DISEASES_FALLBACK,
        )
        return [GlobalDiseaseStat.from_dict(item) for item in result.value]

    async def disease_fact_sheet(self, disease: str) -> str:
        request = DiseaseFactSheetRequest(disease=disease)
        instructions, message = analysis_prompts.disease_fact_sheet_prompt(request)

        async def _call() -> str:
            text = await self.llm_client.complete(instructions, message, max_tokens=700)
            return enforce_disclaimer(text)

        result = await self.caller.guarded(
            request.kind,
            fingerprint(request),
            _call,
            fallbacks.disease_fact_sheet_fallback(disease),
        )
        return result.value

    async def city_live_feed(self, city: str) -> ResilientResult[list[CityFeedEvent]]:
        """Recent simulated reports for ``city``; an empty list means no new events."""
        request = CityLiveFeedRequest(city=city)
        instructions, message = analysis_prompts.city_live_feed_prompt(request)

        async def _call() -> list[dict[str, Any]]:
            items = await self.llm_client.complete_json_list(
                instructions,
                message,
                required_keys=("id", "disease", "area", "severity", "time"),
                temperature=0.7,
            )
            return [asdict(CityFeedEvent.from_dict(item)) for item in items]

        result = await self.caller.guarded(
            request.kind, fingerprint(request), _call, fallbacks.CITY_LIVE_FEED_FALLBACK
        )
        events = [CityFeedEvent.from_dict(item) for item in result.value]
        return ResilientResult(events, result.source, result.is_fallback)

    async def disease_stats(self, disease: str, country: str = "") -> ResilientResult[DiseaseStats]:
        request = DiseaseStatsRequest(disease=disease, country=country)
        instructions, message = analysis_prompts.disease_stats_prompt(request)

        async def _call() -> dict[str, Any]:
            item = await self.llm_client.complete_json_object(
                instructions,
                message,
                required_keys=("disease_name", "total_global_cases"),
                max_tokens=700,
            )
            return DiseaseStats.from_dict(item).to_dict()

        result = await self.caller.guarded(
            request.kind,
            fingerprint(request),
            _call,
            fallbacks.disease_stats_fallback(disease),
        )
        return ResilientResult(DiseaseStats.from_dict(result.value), result.source, result.is_fallback)

"""MCP tools for health checks and progress tracking.

A health check scores the vitals locally, asks the AI service for
recommendations (cached, breaker-protected), and stores the combined
record in the encrypted history when storage is enabled.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from oracle_health.core.storage.history import HealthHistoryRepository, RepositoryError
from oracle_health.domains.health.domain_logic.risk_engine import calculate_bmi, predict_risks
from oracle_health.domains.health.domain_logic.risk_models import (
    HealthRecord,
    Profile,
    VitalsSnapshot,
)

if TYPE_CHECKING:
    from oracle_health.domains.health.analysis.service import HealthAIService

logger = logging.getLogger(__name__)

# Progress charts show at most this many checks
PROGRESS_WINDOW = 10


async def build_health_report(
    vitals: VitalsSnapshot,
    profile: Profile,
    service: HealthAIService,
    repository: HealthHistoryRepository | None = None,
) -> HealthRecord:
    """Score ``vitals``, attach AI recommendations and persist the record.

    Never raises for AI or storage failures: the AI layer substitutes a
    fallback and a failed save is logged.
    """
    predictions = predict_risks(vitals, profile.age)
    analysis = await service.health_analysis_detailed(vitals, profile, predictions)

    now = datetime.now(timezone.utc).isoformat()
    record = HealthRecord(
        id="",
        date=now,
        vitals=vitals,
        bmi=calculate_bmi(vitals.height_cm, vitals.weight_kg),
        predictions=predictions,
        recommendations=analysis.value,
        recommendations_fallback=analysis.is_fallback,
    )

    if repository is not None:
        try:
            repository.save_record(record)
        except Exception:
            logger.exception("Failed to persist health record — continuing")
    return record


def register_health_report_tools(
    mcp: FastMCP,
    service: HealthAIService,
    repository: HealthHistoryRepository | None = None,
) -> None:
    """Register health check, progress and fact sheet tools on the MCP server."""

    @mcp.tool
    async def health_risk_report(
        ctx: Context,
        systolic_bp: float,
        diastolic_bp: float,
        blood_glucose: float,
        cholesterol: float,
        height_cm: float,
        weight_kg: float,
        age: int,
        gender: str = "",
        country: str = "",
        city: str = "",
        allergies: str = "",
        notes: str = "",
    ) -> str:
        """Estimate diabetes, cardiovascular and hypertension risk from your vitals.

        Risk levels come from a rule-based heuristic (not a clinical model) and
        are followed by AI-written recommendations.

        Args:
            systolic_bp: Systolic blood pressure in mmHg.
            diastolic_bp: Diastolic blood pressure in mmHg.
            blood_glucose: Fasting blood glucose in mg/dL.
            cholesterol: Total cholesterol in mg/dL.
            height_cm: Height in centimetres.
            weight_kg: Weight in kilograms.
            age: Age in years.
            gender: Optional gender, passed to the AI analysis.
            country: Optional country, for regional advice.
            city: Optional city, for regional advice.
            allergies: Optional allergies, passed to the AI analysis.
            notes: Optional free-text health notes.
        """
        if age < 0:
            return json.dumps({"status": "error", "error": "age must not be negative"})

        vitals = VitalsSnapshot(
            systolic_bp=systolic_bp,
            diastolic_bp=diastolic_bp,
            blood_glucose=blood_glucose,
            cholesterol=cholesterol,
            height_cm=height_cm,
            weight_kg=weight_kg,
        )
        extra = {k: v for k, v in {"allergies": allergies, "notes": notes}.items() if v}
        profile = Profile(age=age, gender=gender, country=country, city=city, extra=extra)

        record = await build_health_report(vitals, profile, service, repository)
        payload = record.to_dict()
        payload["status"] = "ok"
        payload["vitals_valid"] = vitals.is_valid
        payload["stored"] = bool(record.id)
        return json.dumps(payload)

    @mcp.tool
    async def health_progress_analysis(ctx: Context, age: int = 0, limit: int = PROGRESS_WINDOW) -> str:
        """Summarize how your stored health checks are trending.

        Requires at least 2 stored health checks.

        Args:
            age: Your current age in years (adds context to the summary).
            limit: Number of most recent checks to include (default: 10).
        """
        if repository is None:
            return json.dumps({
                "status": "storage_disabled",
                "message": "Set ENCRYPTION_KEY to keep a health history.",
            })

        try:
            records = repository.list_records(limit=max(limit, 2))
        except RepositoryError as exc:
            logger.error("Cannot read health history: %s", exc)
            return json.dumps({
                "status": "error",
                "error": "stored health records cannot be decrypted with the configured key",
            })
        if len(records) < 2:
            return json.dumps({
                "status": "insufficient_data",
                "records_available": len(records),
                "message": "At least 2 health checks are needed to analyze progress.",
            })

        analysis = await service.progress_analysis_detailed(records, Profile(age=age))
        return json.dumps({
            "status": "ok",
            "records_analyzed": len(records),
            "history": repository.get_score_history(limit=len(records)),
            "summary": analysis.value,
            "summary_fallback": analysis.is_fallback,
        })

    @mcp.tool
    async def disease_fact_sheet(ctx: Context, disease: str) -> str:
        """Get a plain-language fact sheet about a disease.

        Args:
            disease: Disease name (e.g., 'Hypertension').
        """
        if not disease.strip():
            return json.dumps({"status": "error", "error": "disease must not be empty"})
        text = await service.disease_fact_sheet(disease)
        return json.dumps({"status": "ok", "disease": disease.strip(), "fact_sheet": text})

"""Static payloads served when the AI service is unavailable."""

from __future__ import annotations

from typing import Any

from oracle_health.domains.health.domain_logic.risk_models import DISEASE_INFO

HEALTH_ANALYSIS_FALLBACK = (
    "Could not fetch AI-powered recommendations. Please check your connection. "
    "Based on your inputs, maintaining a balanced diet and regular exercise is advised."
)

PROGRESS_ANALYSIS_FALLBACK = (
    "A personalised progress summary is not available right now. Compare your "
    "latest readings with earlier ones in the chart and keep logging regularly "
    "to see clearer trends."
)

COMPANION_CHAT_FALLBACK = (
    "Sorry, I'm having trouble connecting right now. Please try again in a few "
    "minutes. For urgent health concerns, contact a healthcare professional."
)

TRENDING_DISEASES_FALLBACK = [
    {
        "name": "Seasonal Influenza",
        "cases": 1500,
        "prevention": "Get an annual flu shot and wash hands frequently.",
    },
    {
        "name": "Common Cold",
        "cases": 3200,
        "prevention": "Avoid touching your face and maintain distance from sick individuals.",
    },
    {
        "name": "COVID-19",
        "cases": 450,
        "prevention": "Stay up-to-date with vaccinations and wear a mask in crowded indoor spaces.",
    },
]

GLOBAL_TRENDING_DISEASES_FALLBACK = [
    {"name": "Influenza", "global_cases": 12_000_000, "country_cases": 150_000},
    {"name": "RSV", "global_cases": 8_500_000, "country_cases": 95_000},
    {"name": "Norovirus", "global_cases": 5_000_000, "country_cases": 75_000},
]


def disease_fact_sheet_fallback(disease: str) -> str:
    """Built-in fact sheet for tracked conditions, generic text otherwise."""
    for name, info in DISEASE_INFO.items():
        if name.lower() == disease.strip().lower():
            prevention = "\n".join(f"- {tip}" for tip in info["prevention"])
            return f"## {name}\n\n{info['description']}\n\n### Prevention\n{prevention}"
    return (
        f"Detailed information about {disease} is not available right now. "
        "Please consult a healthcare professional or an official public health source."
    )


# An empty feed renders as "no new events"
CITY_LIVE_FEED_FALLBACK: list[dict[str, str]] = []


def disease_stats_fallback(disease: str) -> dict[str, Any]:
    """Stats placeholder: no case counts, built-in prevention for tracked conditions."""
    name = disease.strip()
    prevention = [
        "Follow guidance from your local public health authority.",
        "Consult a healthcare professional about your personal risk.",
    ]
    for tracked, info in DISEASE_INFO.items():
        if tracked.lower() == name.lower():
            name = tracked
            prevention = list(info["prevention"])
            break
    return {
        "disease_name": name,
        "total_global_cases": 0,
        "symptoms": [],
        "recognized_drugs": [],
        "prevention": prevention,
        "treatment": ["Consult a healthcare professional for diagnosis and treatment options."],
    }

"""Prompt builders — one (task instructions, user message) pair per request kind."""

from __future__ import annotations

from oracle_health.domains.health.analysis.requests import (
    CityLiveFeedRequest,
    CompanionChatRequest,
    DiseaseFactSheetRequest,
    DiseaseStatsRequest,
    GlobalTrendingDiseasesRequest,
    HealthAnalysisRequest,
    ProgressAnalysisRequest,
    TrendingDiseasesRequest,
)
from oracle_health.domains.health.domain_logic.risk_models import Profile

PERSONALITY_INSTRUCTIONS = {
    "Empathetic & Encouraging": "Your tone should be encouraging and supportive.",
    "Direct & Data-Driven": (
        "You should be direct, concise, and focus on factual, data-driven information."
    ),
    "Calm & Reassuring": (
        "Your goal is to provide information in a soothing, non-alarming, and reassuring way."
    ),
    "Energetic & Motivational": (
        "You should use positive and energetic language to inspire and motivate the user."
    ),
}

PromptPair = tuple[str, str]


def _profile_lines(profile: Profile) -> list[str]:
    lines = [f"- Age: {profile.age}"]
    if profile.gender:
        lines.append(f"- Gender: {profile.gender}")
    if profile.city or profile.country:
        location = ", ".join(part for part in (profile.city, profile.country) if part)
        lines.append(f"- Location: {location}")
    for key, value in sorted(profile.extra.items()):
        if value:
            lines.append(f"- {key.replace('_', ' ').capitalize()}: {value}")
    return lines


def health_analysis_prompt(request: HealthAnalysisRequest) -> PromptPair:
    vitals = request.vitals
    instructions = (
        "Analyze the health profile below and give personalized, actionable "
        "recommendations based on WHO guidelines. Consider regional factors (such "
        "as dietary staples) when a location is given. Structure the output into "
        'two sections: "Key Observations" and "Recommendations". Do not repeat '
        "the risk levels; explain what the combination of vitals and risks means."
    )
    lines = ["User Profile:", *_profile_lines(request.profile), "", "Vitals:"]
    lines += [
        f"- Blood Pressure: {vitals.systolic_bp:g}/{vitals.diastolic_bp:g} mmHg",
        f"- Blood Glucose: {vitals.blood_glucose:g} mg/dL",
        f"- Cholesterol: {vitals.cholesterol:g} mg/dL",
        f"- BMI: {request.bmi:.1f}",
        "",
        "Rule-based Risk Estimates:",
    ]
    lines += [f"- {p.disease}: {p.risk_level} risk" for p in request.predictions]
    return instructions, "\n".join(lines)


def progress_analysis_prompt(request: ProgressAnalysisRequest) -> PromptPair:
    instructions = (
        "Review the user's health check history below, oldest first. Describe "
        "how each measurement is trending, call out meaningful improvements or "
        "deteriorations, and suggest what to focus on next. Keep it under 250 words."
    )
    lines = ["User Profile:", *_profile_lines(request.profile), "", "History:"]
    for record in request.records:
        v = record.vitals
        risks = ", ".join(f"{p.disease}: {p.risk_level}" for p in record.predictions)
        lines.append(
            f"- {record.date[:10]}: BP {v.systolic_bp:g}/{v.diastolic_bp:g}, "
            f"glucose {v.blood_glucose:g}, cholesterol {v.cholesterol:g}, "
            f"BMI {record.bmi:.1f} ({risks})"
        )
    return instructions, "\n".join(lines)


def companion_chat_prompt(request: CompanionChatRequest) -> PromptPair:
    coach = request.coach
    personality = PERSONALITY_INSTRUCTIONS.get(
        coach.personality, PERSONALITY_INSTRUCTIONS["Empathetic & Encouraging"]
    )
    instructions = (
        f"You are a helpful and versatile AI Health Companion named {coach.name}. "
        f"{personality} You can provide safe, general health information, suggest "
        "which kind of doctor to see for a concern, and answer general questions "
        "naturally. Reply to the latest user message only."
    )
    lines = []
    if request.recent_history:
        lines.append("Conversation so far:")
        for turn in request.recent_history:
            speaker = "User" if turn.sender == "user" else coach.name
            lines.append(f"{speaker}: {turn.text}")
        lines.append("")
    lines.append(f"User: {request.message}")
    return instructions, "\n".join(lines)


def trending_diseases_prompt(request: TrendingDiseasesRequest) -> PromptPair:
    instructions = (
        "Respond with a JSON array only, no prose. Each item must have the keys "
        '"name" (string), "cases" (integer) and "prevention" (string).'
    )
    message = (
        f"Based on the location ({request.city}, {request.country}) and the current "
        "time of year, list three common communicable diseases that might be trending. "
        "For each, give a realistic but simulated number of monthly cases for the city "
        "and one concise, actionable preventative tip."
    )
    return instructions, message


def global_trending_diseases_prompt(request: GlobalTrendingDiseasesRequest) -> PromptPair:
    instructions = (
        "Respond with a JSON array only, no prose. Each item must have the keys "
        '"name" (string), "global_cases" (integer) and "country_cases" (integer).'
    )
    message = (
        "List three globally trending communicable diseases for the current month. "
        "For each, give a realistic but simulated number of total global monthly cases "
        f"and a plausible simulated number of monthly cases for {request.country}. "
        "Country cases should be a small, realistic fraction of global cases."
    )
    return instructions, message


def disease_fact_sheet_prompt(request: DiseaseFactSheetRequest) -> PromptPair:
    instructions = (
        "Write a short consumer fact sheet in Markdown with the sections "
        '"Overview", "Common Symptoms", "Risk Factors" and "Prevention".'
    )
    return instructions, f"Disease: {request.disease.strip()}"


def city_live_feed_prompt(request: CityLiveFeedRequest) -> PromptPair:
    instructions = (
        "Respond with a JSON array only, no prose. Each item must have the keys "
        '"id" (string), "disease" (string), "area" (string), '
        '"severity" ("Mild", "Moderate" or "Severe") and "time" (string, e.g. "5 min ago").'
    )
    message = (
        f"Simulate 1 to 3 new communicable disease reports from the last hour in "
        f"{request.city.strip()}. Use real neighbourhood names for the area and "
        "keep severities realistic; most reports should be Mild or Moderate."
    )
    return instructions, message


def disease_stats_prompt(request: DiseaseStatsRequest) -> PromptPair:
    instructions = (
        "Respond with one JSON object only, no prose, with the keys "
        '"disease_name" (string), "total_global_cases" (integer), "symptoms", '
        '"recognized_drugs", "prevention" and "treatment" (arrays of strings). '
        "Prevention and treatment should follow WHO guidelines."
    )
    message = f"Disease: {request.disease.strip()}"
    if request.country:
        message += f"\nUser country: {request.country}"
    return instructions, message

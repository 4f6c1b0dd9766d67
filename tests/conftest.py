"""Shared test fixtures for Oracle Health tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from oracle_health.core.llm.client import HealthLLMClient  # noqa: E402
from oracle_health.core.llm.providers.mock import MockProvider  # noqa: E402
from oracle_health.core.resilience.caller import ResilientCaller  # noqa: E402
from oracle_health.core.resilience.cooldown import CooldownRegistry  # noqa: E402
from oracle_health.core.resilience.store import SessionCacheStore  # noqa: E402
from oracle_health.domains.health.domain_logic.risk_models import (  # noqa: E402
    Profile,
    VitalsSnapshot,
)


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Resilience fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session_store() -> SessionCacheStore:
    return SessionCacheStore()


@pytest.fixture
def cooldowns(clock: FakeClock) -> CooldownRegistry:
    return CooldownRegistry(clock)


@pytest.fixture
def caller(session_store, cooldowns, clock) -> ResilientCaller:
    """A ResilientCaller wired to the fake clock with default policies."""
    return ResilientCaller(session_store, cooldowns, clock=clock)


# ---------------------------------------------------------------------------
# AI provider fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider(response_content="Key Observations: fine. Recommendations: walk daily.")


@pytest.fixture
def llm_client(mock_provider: MockProvider) -> HealthLLMClient:
    return HealthLLMClient(mock_provider, provider_name="mock")


@pytest.fixture
def ai_service(llm_client, caller):
    from oracle_health.domains.health.analysis.service import HealthAIService

    return HealthAIService(llm_client, caller)


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------

def make_vitals(**overrides) -> VitalsSnapshot:
    """Healthy-adult vitals with optional overrides."""
    defaults = dict(
        systolic_bp=115,
        diastolic_bp=75,
        blood_glucose=90,
        cholesterol=180,
        height_cm=175,
        weight_kg=70,
    )
    defaults.update(overrides)
    return VitalsSnapshot(**defaults)


@pytest.fixture
def vitals() -> VitalsSnapshot:
    return make_vitals()


@pytest.fixture
def profile() -> Profile:
    return Profile(age=42, name="Sam", gender="other", country="India", city="Bangalore")


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def health_db():
    """Create an in-memory HealthDatabase for testing."""
    from oracle_health.core.storage.database import HealthDatabase

    db = HealthDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def payload_cipher():
    from oracle_health.core.storage.encryption import PayloadCipher

    return PayloadCipher(PayloadCipher.generate_key())


@pytest.fixture
def history_repository(health_db, payload_cipher):
    """Create a HealthHistoryRepository backed by in-memory SQLite."""
    from oracle_health.core.storage.history import HealthHistoryRepository

    return HealthHistoryRepository(health_db, payload_cipher)

"""
Shared pytest fixtures for the training plan test suite.
All fixtures use mock mode — no Gemini key required, no network calls.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode — never call Gemini during tests
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("GEMINI_API_KEY", "<placeholder>")


import pytest

from factories import RecordingGenerator, make_freeform, make_structured

from train_plan.generation import PlanGenerationController
from train_plan.plan_store import PlanStore


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def structured_request():
    return make_structured()


@pytest.fixture
def freeform_request():
    return make_freeform()


@pytest.fixture
def store(tmp_path):
    return PlanStore(tmp_path / "plans.db")


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def controller(generator, store):
    return PlanGenerationController(generator, store)

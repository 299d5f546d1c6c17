"""
generation.py — Submission boundary for plan generation
=======================================================
Owns the only mutable state in the pipeline: which request is in flight
and what the current plan is.

State machine
-------------
  IDLE ──submit──▶ SUBMITTING ──▶ SUCCEEDED | FAILED ──submit / reset──▶ …

  • Single-flight: ``submit`` while SUBMITTING returns a REJECTED result and
    touches nothing.
  • Validation runs before the store is cleared, so a rejected request
    never hides the previous plan.
  • Every accepted submission clears the store, then takes a new request id
    (epoch).  A reply whose id is no longer the latest (after
    ``invalidate``) is discarded as STALE instead of overwriting newer state.
  • All PlanError kinds are turned into a GenerationResult with a
    user-facing message; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from train_plan.b0_prompt_builder import build_prompt
from train_plan.b1_gemini_client import GeminiClient
from train_plan.b1_mock_generator import MockPlanGenerator
from train_plan.b2_normalizer import canonicalize_plan
from train_plan.b3_pdf_exporter import DEFAULT_FILENAME, build_plan_pdf, export_plan_pdf
from train_plan.config import Settings, get_settings
from train_plan.errors import ExportError, PlanError, ValidationError
from train_plan.guardrails import GuardrailLevel, GuardrailsPipeline, GuardrailViolation
from train_plan.models import PlanFormat, PlanRequest, StructuredPlanRequest
from train_plan.plan_store import PlanStore

logger = logging.getLogger(__name__)


class PlanGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class GenerationState(str, Enum):
    IDLE       = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED  = "succeeded"
    FAILED     = "failed"


class GenerationStatus(str, Enum):
    SUCCESS  = "success"
    FAILED   = "failed"
    REJECTED = "rejected"   # another request was still in flight
    STALE    = "stale"      # reply arrived after the request was superseded


@dataclass(frozen=True)
class GenerationResult:
    status:     GenerationStatus
    request_id: int = 0
    plan:       Optional[str] = None
    message:    str = ""
    error:      Optional[PlanError] = None
    advisories: list[GuardrailViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.SUCCESS


@dataclass(frozen=True)
class ExportResult:
    ok:      bool
    message: str
    path:    Optional[Path] = None


class PlanGenerationController:
    """Runs one generation at a time and keeps the Plan Store consistent."""

    def __init__(
        self,
        generator: PlanGenerator,
        store: PlanStore,
        guardrails: GuardrailsPipeline | None = None,
    ) -> None:
        self._generator  = generator
        self._store      = store
        self._guardrails = guardrails or GuardrailsPipeline()
        self._state      = GenerationState.IDLE
        self._epoch      = 0
        self.last_error: Optional[PlanError] = None

    # ── Read-only views ──────────────────────────────────────────────────────

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def is_generating(self) -> bool:
        return self._state == GenerationState.SUBMITTING

    @property
    def current_plan(self) -> Optional[str]:
        return self._store.get()

    # ── Generation ───────────────────────────────────────────────────────────

    async def submit(self, request: PlanRequest) -> GenerationResult:
        """Generate a plan for *request*; never raises PlanError."""
        if self.is_generating:
            logger.info("Submission ignored: request %d still in flight", self._epoch)
            return GenerationResult(
                status=GenerationStatus.REJECTED,
                request_id=self._epoch,
                message="A training plan is already being generated.",
            )

        checked = self._guardrails.check_request(request)
        if checked.blocked:
            blocking = [v for v in checked.violations if v.level == GuardrailLevel.BLOCK]
            return self._fail(
                ValidationError("; ".join(v.message for v in blocking), checked.violations),
                request_id=0,
                message=" ".join(v.message for v in blocking),
            )

        self._store.clear()
        self.last_error = None
        self._epoch += 1
        request_id = self._epoch
        self._state = GenerationState.SUBMITTING

        requested = (
            request.output_format if isinstance(request, StructuredPlanRequest)
            else PlanFormat.MARKDOWN
        )
        try:
            try:
                reply = await self._generator.generate(build_prompt(request))
            except PlanError as exc:
                if request_id != self._epoch:
                    return self._stale(request_id)
                return self._fail(exc, request_id)

            if request_id != self._epoch:
                return self._stale(request_id)

            plan = canonicalize_plan(reply, requested)
            self._store.set(plan)
            advisories = checked.warnings + checked.infos + self._guardrails.check_plan(plan).violations
            self._state = GenerationState.SUCCEEDED
        finally:
            # anything else (including cancellation) must not leave us SUBMITTING
            if request_id == self._epoch and self._state == GenerationState.SUBMITTING:
                self._state = GenerationState.FAILED

        logger.info("Request %d produced a plan of %d characters", request_id, len(plan))
        return GenerationResult(
            status=GenerationStatus.SUCCESS,
            request_id=request_id,
            plan=plan,
            message="Training plan generated successfully!",
            advisories=advisories,
        )

    def invalidate(self) -> None:
        """Supersede the in-flight request; its reply will be discarded."""
        self._epoch += 1
        self._state = GenerationState.IDLE

    def clear_plan(self) -> None:
        """Drop the current plan and supersede anything still in flight."""
        self.invalidate()
        self._store.clear()
        self.last_error = None

    def reset(self) -> None:
        """Return to IDLE after a finished attempt (no effect while submitting)."""
        if not self.is_generating:
            self._state = GenerationState.IDLE
            self.last_error = None

    def _fail(self, exc: PlanError, request_id: int, message: str = "") -> GenerationResult:
        logger.warning("Plan generation failed (%s): %s", type(exc).__name__, exc)
        self._state = GenerationState.FAILED
        self.last_error = exc
        return GenerationResult(
            status=GenerationStatus.FAILED,
            request_id=request_id,
            message=message or exc.user_message,
            error=exc,
        )

    def _stale(self, request_id: int) -> GenerationResult:
        logger.info("Discarding reply for superseded request %d", request_id)
        return GenerationResult(status=GenerationStatus.STALE, request_id=request_id)

    # ── Copy / export ────────────────────────────────────────────────────────

    def copy_text(self) -> Optional[str]:
        """Plain text for the clipboard, or None when there is no plan."""
        return self._store.get()

    def pdf_bytes(self) -> Optional[bytes]:
        """PDF bytes for a download button, or None when there is no plan."""
        plan = self._store.get()
        if not plan:
            return None
        return build_plan_pdf(plan)

    def export(self, path: Optional[Path | str] = None) -> ExportResult:
        """Save the current plan as PDF; failures are reported, never raised."""
        plan = self._store.get()
        if not plan:
            return ExportResult(ok=False, message="There is no training plan to export yet.")
        try:
            saved = export_plan_pdf(plan, path)
        except ExportError as exc:
            return ExportResult(ok=False, message=f"{exc.user_message} {exc}")
        return ExportResult(ok=True, message="Your PDF is downloaded.", path=saved)


# ─── Factory ──────────────────────────────────────────────────────────────────

def make_generator(settings: Settings) -> PlanGenerator:
    """Mock generator when FORCE_MOCK_MODE is set, Gemini otherwise."""
    if settings.app.force_mock_mode:
        return MockPlanGenerator()
    return GeminiClient(settings.gemini)


def build_controller(settings: Settings | None = None) -> PlanGenerationController:
    """Wire a controller from settings and restore the persisted draft."""
    settings = settings or get_settings()
    store = PlanStore(settings.store.db_path)
    store.load()
    return PlanGenerationController(make_generator(settings), store)


def default_export_path(settings: Settings | None = None) -> Path:
    settings = settings or get_settings()
    return settings.store.export_dir / DEFAULT_FILENAME

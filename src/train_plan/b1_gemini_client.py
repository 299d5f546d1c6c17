"""
Block 1: AI Client (Gemini generateContent)
===========================================
Sends the assembled prompt to the Gemini REST endpoint and extracts the
reply text from ``candidates[0].content.parts[0].text``.

  GeminiClient.generate(prompt) → str          (async)

Failure modes
-------------
  UpstreamError           transport failure (status=None) or non-2xx status
  MalformedResponseError  2xx status but the envelope lacks the text part

No retries: every failure requires a new user-initiated submission.  The
only safeguard added on top of the provider call is a request timeout.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from train_plan.config import GeminiConfig, get_settings
from train_plan.errors import MalformedResponseError, UpstreamError
from train_plan.models import GenerateContentRequest, GenerateContentResponse

logger = logging.getLogger(__name__)


class GeminiClient:
    """Async HTTP client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        config: GeminiConfig | None = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Args:
            config:      Gemini settings; loaded from the environment when omitted.
            http_client: Shared AsyncClient.  When omitted a short-lived client
                         is opened for each call.
        """
        self._cfg = config or get_settings().gemini
        self._http = http_client

    async def generate(self, prompt: str) -> str:
        """Return the plan text the provider generated for *prompt*."""
        payload = GenerateContentRequest.for_prompt(prompt).to_payload()
        logger.debug("Sending prompt to %s:\n%s", self._cfg.model, prompt)

        if self._http is not None:
            response = await self._post(self._http, payload)
        else:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self._cfg.timeout_seconds)) as client:
                response = await self._post(client, payload)

        return self._extract_text(response)

    # ── Internal helpers ─────────────────────────────────────────────────────

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        try:
            response = await client.post(
                self._cfg.generate_url,
                params={"key": self._cfg.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._cfg.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise UpstreamError(None, str(exc)) from exc

        if not response.is_success:
            logger.warning("Gemini API error %s: %s", response.status_code, response.text[:500])
            raise UpstreamError(response.status_code, response.text)
        return response

    def _extract_text(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as exc:  # JSONDecodeError or UnicodeDecodeError
            raise MalformedResponseError("Gemini reply is not valid JSON") from exc
        logger.debug("Gemini response envelope: %s", data)

        if not isinstance(data, dict):
            raise MalformedResponseError("Unexpected API response format")
        try:
            envelope = GenerateContentResponse.model_validate(data)
        except PydanticValidationError as exc:
            raise MalformedResponseError(f"Unexpected API response format: {exc}") from exc

        text = envelope.first_text()
        if text is None:
            logger.warning("Unexpected Gemini response format: %s", data)
            raise MalformedResponseError("Unexpected API response format")
        return text

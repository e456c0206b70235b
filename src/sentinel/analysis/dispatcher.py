"""Analysis dispatcher — sends content to the analysis service and returns raw JSON.

The service is a Gemini-style ``generateContent`` endpoint. The dispatcher
only selects the effective mode, builds the request, and parses the reply
into a JSON object. Structural validation is left to the normalizer, and
failures are never retried here: identical prompts to a non-deterministic
backend are not idempotent, so retrying is the caller's decision.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from sentinel.analysis.prompts import build_prompt, system_instruction
from sentinel.config import SentinelConfig
from sentinel.errors import AnalysisUnavailable
from sentinel.report.models import Mode, ScanType
from sentinel.report.schema import effective_mode, resolve

logger = logging.getLogger(__name__)


class AnalysisDispatcher:
    """Client for the external analysis service."""

    def __init__(
        self,
        config: SentinelConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or SentinelConfig()
        self._session = session
        self._owns_session = session is None

    @property
    def url(self) -> str:
        base = self._config.api_base.rstrip("/")
        return f"{base}/models/{self._config.model}:generateContent"

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def build_payload(self, content: str, scan_type: ScanType, mode: Mode) -> dict:
        """Build the request body for a scan, using the effective mode."""
        effective = effective_mode(scan_type, mode)
        contract = resolve(scan_type, mode)
        generation: dict[str, Any] = {
            "responseMimeType": "application/json",
            "responseSchema": contract.to_response_schema(),
        }
        if self._config.thinking_budget:
            generation["thinkingConfig"] = {
                "thinkingBudget": self._config.thinking_budget
            }
        return {
            "systemInstruction": {
                "parts": [{"text": system_instruction(effective)}],
            },
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": build_prompt(content, scan_type, effective)}],
                }
            ],
            "generationConfig": generation,
        }

    async def dispatch(self, content: str, scan_type: ScanType, mode: Mode) -> dict:
        """Run one analysis and return the parsed JSON document.

        Raises AnalysisUnavailable on transport failure, timeout, a non-2xx
        reply, or a reply whose text is not a JSON object.
        """
        payload = self.build_payload(content, scan_type, mode)
        logger.info(
            "Dispatching %s analysis (mode %s) to %s",
            scan_type.value,
            effective_mode(scan_type, mode).value,
            self._config.model,
        )
        response = await self._post(payload)
        document = parse_document(extract_text(response))
        logger.debug("Analysis returned fields: %s", ", ".join(sorted(document)))
        return document

    async def _post(self, payload: dict) -> dict:
        if not self._config.api_key:
            raise AnalysisUnavailable("No analysis API key configured")

        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            )

        try:
            async with self._session.post(
                self.url,
                json=payload,
                headers={"x-goog-api-key": self._config.api_key},
            ) as response:
                if response.status != 200:
                    body = await response.text()
                    raise AnalysisUnavailable(
                        f"Analysis service returned HTTP {response.status}: "
                        f"{body[:200]}"
                    )
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise AnalysisUnavailable("Analysis service timed out") from e
        except aiohttp.ClientError as e:
            raise AnalysisUnavailable(f"Analysis service unreachable: {e}") from e
        except json.JSONDecodeError as e:
            raise AnalysisUnavailable("Analysis service sent invalid JSON") from e


def extract_text(response: Any) -> str:
    """Concatenate the answer text of the first candidate, skipping thoughts."""
    try:
        parts = response["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise AnalysisUnavailable("Analysis service returned no candidates") from None
    if not isinstance(parts, list):
        raise AnalysisUnavailable("Analysis service returned no candidates")

    text = "".join(
        part["text"]
        for part in parts
        if isinstance(part, dict)
        and not part.get("thought")
        and isinstance(part.get("text"), str)
    )
    if not text.strip():
        raise AnalysisUnavailable("Analysis service returned an empty answer")
    return text


def parse_document(text: str) -> dict:
    """Parse the answer text as a JSON object.

    Models sometimes wrap JSON in a Markdown code fence; that is stripped.
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        stripped = stripped.rsplit("```", 1)[0]
    try:
        document = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise AnalysisUnavailable(f"Analysis output is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise AnalysisUnavailable("Analysis output is not a JSON object")
    return document

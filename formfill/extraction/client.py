"""Extraction client for the hosted vision-language model.

One call sends one document image to an OpenAI-compatible chat-completion
gateway and turns the model's JSON reply into an ``ExtractedRecord``.
Calls are made at most once; there is no retry.
"""

import asyncio
import base64
import json
import re
from typing import Any, Protocol

import aiohttp

from formfill.documents.models import DocumentClass, ExtractedRecord
from formfill.utils.config import GatewayConfig, resolve_api_key
from formfill.utils.logger import get_logger

from .errors import (
    ExtractionError,
    GatewayError,
    ParseError,
    RateLimitError,
    UsageLimitError,
)
from .modes import ExtractionMode
from .prompts import system_prompt, user_prompt

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?[ \t]*\n?([\s\S]*?)\n?```", re.IGNORECASE)
_OUTER_OBJECT = re.compile(r"\{[\s\S]*\}")


class ExtractionClient(Protocol):
    """Anything that can extract a record from one document image."""

    async def extract(
        self,
        image: bytes,
        document_class: DocumentClass,
        mime_type: str,
        mode: ExtractionMode,
    ) -> ExtractedRecord:
        """Extract fields from an image.

        Raises:
            ExtractionError: If the extraction failed for any reason.
        """
        ...


def parse_model_content(content: str) -> dict[str, Any]:
    """Pull the JSON object out of a model reply.

    The reply may wrap the object in a fenced code block or surround it
    with prose.

    Raises:
        ParseError: If no JSON object can be decoded.
    """
    match = _FENCED_BLOCK.search(content)
    if match:
        candidate = match.group(1)
    else:
        match = _OUTER_OBJECT.search(content)
        candidate = match.group(0) if match else content

    try:
        data = json.loads(candidate.strip())
    except json.JSONDecodeError as exc:
        raise ParseError("Failed to parse extracted data") from exc

    if not isinstance(data, dict):
        raise ParseError("Failed to parse extracted data")
    return data


def _message_content(body: str) -> str:
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise GatewayError("Invalid JSON from AI gateway") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not isinstance(content, str) or not content.strip():
        raise GatewayError("No content in model response")
    return content


class GatewayExtractionClient:
    """Extraction client backed by a chat-completion gateway over HTTP.

    Args:
        config: Gateway URL, model name and timeout.
        api_key: Bearer token for the gateway.
    """

    def __init__(self, config: GatewayConfig, api_key: str) -> None:
        self.config = config
        self._api_key = api_key

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "GatewayExtractionClient":
        """Create a client, reading the API key from the environment.

        Raises:
            ConfigurationError: If the API key is not set.
        """
        return cls(config, resolve_api_key(config))

    def build_payload(
        self,
        image: bytes,
        document_class: DocumentClass,
        mime_type: str,
        mode: ExtractionMode,
    ) -> dict[str, Any]:
        """Build the chat-completion request body for one image."""
        encoded = base64.b64encode(image).decode("ascii")
        data_url = f"data:{mime_type or 'image/jpeg'};base64,{encoded}"
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt(mode)},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": user_prompt(document_class, mode)},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                },
            ],
        }

    async def extract(
        self,
        image: bytes,
        document_class: DocumentClass,
        mime_type: str,
        mode: ExtractionMode,
    ) -> ExtractedRecord:
        """Run one extraction against the gateway.

        Args:
            image: Raw image or PDF bytes.
            document_class: Class inferred for the document.
            mime_type: MIME type of ``image``.
            mode: Which fields to request.

        Returns:
            The fields the model returned.

        Raises:
            RateLimitError: On HTTP 429.
            UsageLimitError: On HTTP 402.
            GatewayError: On transport failures and other non-2xx answers.
            ParseError: If the model's reply holds no JSON object.
        """
        if not image:
            raise ExtractionError("No image data provided")

        logger.info("Extracting %s document in %s mode", document_class, mode)
        payload = self.build_payload(image, document_class, mime_type, mode)
        status, body = await self._post(payload)

        if status == 429:
            logger.error("AI gateway rate limit hit: %s", body[:200])
            raise RateLimitError("Rate limit exceeded.", status)
        if status == 402:
            logger.error("AI gateway usage limit reached: %s", body[:200])
            raise UsageLimitError("Usage limit reached.", status)
        if not 200 <= status < 300:
            logger.error("AI gateway error %d: %s", status, body[:200])
            raise GatewayError(f"AI gateway error: {status}", status)

        content = _message_content(body)
        try:
            data = parse_model_content(content)
        except ParseError:
            logger.error("Failed to parse model response: %s", content[:200])
            raise

        record = ExtractedRecord.from_payload(data)
        logger.info("Extraction successful: %s", ", ".join(record.present_fields()))
        return record

    async def _post(self, payload: dict[str, Any]) -> tuple[int, str]:
        """POST the payload and return the status code and raw body."""
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.config.url, json=payload, headers=headers
                ) as response:
                    return response.status, await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("AI gateway request failed: %s", exc)
            raise GatewayError(f"AI gateway request failed: {exc}") from exc

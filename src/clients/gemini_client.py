"""
Gemini API client for index screening.

Uses httpx for direct calls to the Generative Language REST API, with Google
Search grounding so the answer carries its sources.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from config.settings import Settings
from src.errors import ConfigurationError, ProviderError
from src.models.provider import ProviderPayload, RawCitation, RawStock

logger = logging.getLogger(__name__)


SCREENING_PROMPT = """Find the latest performance data for ALL available constituents of the {index} index on the Egyptian Exchange (EGX).
List as many of the index members as you can identify, not only the largest ones.

For each stock report:
1. Symbol/ticker (e.g. COMI, ABUK)
2. Full company name
3. Current price in EGP
4. Percentage change over the last 6 months
5. Percentage change over the last 1 month
6. Percentage change over the last 1 week (7 days)
7. Current price-to-earnings (P/E) ratio, or 0 if unavailable
8. Most recent analyst fair value or target price in EGP, or 0 if unavailable
9. Sector, if known

Respond with a JSON object holding a "stocks" array and a short "analysis" of
current market trends for the {index} index specifically."""


RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "stocks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "symbol": {"type": "STRING"},
                    "name": {"type": "STRING"},
                    "currentPrice": {"type": "NUMBER"},
                    "change6m": {"type": "NUMBER"},
                    "change1m": {"type": "NUMBER"},
                    "change1w": {"type": "NUMBER"},
                    "peRatio": {"type": "NUMBER"},
                    "fairValue": {"type": "NUMBER"},
                    "sector": {"type": "STRING"},
                },
                "required": ["symbol", "name", "currentPrice", "change6m", "change1m", "change1w"],
            },
        },
        "analysis": {"type": "STRING"},
    },
    "required": ["stocks", "analysis"],
}


def build_screening_prompt(index: str) -> str:
    return SCREENING_PROMPT.format(index=index)


# -----------------------------------------------------------------------------
# Response parsing
# -----------------------------------------------------------------------------


def extract_text(candidate: dict[str, Any]) -> str:
    """Concatenate the text parts of a response candidate."""
    content = candidate.get("content") or {}
    parts = content.get("parts") or []
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    if not texts:
        raise ProviderError("Gemini response contained no text")
    return "".join(texts)


def decode_json_text(text: str) -> dict[str, Any]:
    """Parse the JSON body, tolerating a markdown code fence."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
    text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Invalid JSON in Gemini response: {e}") from e

    if not isinstance(data, dict):
        raise ProviderError("Gemini response JSON is not an object")
    return data


def parse_stocks(items: Any) -> list[RawStock]:
    """Validate stock entries, skipping anything that is not an object."""
    if not isinstance(items, list):
        return []

    stocks = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping malformed stock entry: %r", item)
            continue
        try:
            stocks.append(RawStock.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping unparseable stock entry %r: %s", item.get("symbol"), e)
    return stocks


def extract_citations(candidate: dict[str, Any]) -> list[RawCitation]:
    """
    Pull web sources out of the grounding metadata.

    Chunks without a web entry are kept as empty citations; dropping
    them is left to normalization.
    """
    metadata = candidate.get("groundingMetadata")
    if not isinstance(metadata, dict):
        return []
    chunks = metadata.get("groundingChunks")
    if not isinstance(chunks, list):
        return []

    citations = []
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict):
            citations.append(RawCitation())
            continue
        citations.append(RawCitation(title=web.get("title"), uri=web.get("uri")))
    return citations


def parse_generate_response(data: dict[str, Any]) -> ProviderPayload:
    """
    Map a generateContent response into a ProviderPayload.

    Args:
        data: Decoded response body

    Returns:
        ProviderPayload; stocks may be empty

    Raises:
        ProviderError: If the response shape is unusable
    """
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates or not isinstance(candidates[0], dict):
        raise ProviderError("Gemini response contained no candidates")

    candidate = candidates[0]
    body = decode_json_text(extract_text(candidate))

    analysis = body.get("analysis")
    return ProviderPayload(
        stocks=parse_stocks(body.get("stocks")),
        analysis=analysis if isinstance(analysis, str) else "",
        citations=extract_citations(candidate),
    )


# -----------------------------------------------------------------------------
# Client
# -----------------------------------------------------------------------------


class GeminiClient:
    """
    Async client for the Gemini generateContent endpoint.

    Implements the data provider used by ScreeningSession.
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-pro-preview",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key or not api_key.strip():
            raise ConfigurationError("GEMINI_API_KEY is not set; screening is unavailable")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.provider_timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "GeminiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/models/{self.model}:generateContent"

    async def query(self, index: str) -> ProviderPayload:
        """
        Ask the model for the constituents of an index.

        Args:
            index: Index identifier, e.g. "EGX30"

        Returns:
            ProviderPayload with raw stocks, analysis and citations

        Raises:
            ProviderError: On transport or parse failures
        """
        logger.info("Querying %s for %s", self.model, index)
        data = await self._call_api(build_screening_prompt(index))
        payload = parse_generate_response(data)
        logger.debug(
            "Gemini returned %d stocks and %d citations for %s",
            len(payload.stocks),
            len(payload.citations),
            index,
        )
        return payload

    async def _call_api(self, prompt: str) -> dict[str, Any]:
        """Make API call to Gemini."""
        if not self._client:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

        try:
            response = await self._client.post(self.endpoint, headers=headers, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Gemini API returned HTTP {e.response.status_code}: {_error_message(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini API request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Gemini API returned a non-JSON body") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:200]

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from app.settings import settings
from domain.errors import (
    MalformedResponseError,
    ModelError,
    ProviderError,
    TransientProviderError,
)

logger = logging.getLogger("evaluation_pipeline")

TRANSIENT_STATUSES = {429, 503}


class GeminiTransport:
    """Thin async client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(self, api_key: Optional[str], *, base_url: Optional[str] = None, timeout: float = 60):
        self.api_key = api_key
        self.base_url = (base_url or settings.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout

    async def generate_content(self, model: str, contents: List[Dict]) -> Dict:
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key or ""}
        payload = {
            "contents": contents,
            "generationConfig": {"temperature": 0.2, "responseMimeType": "application/json"},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            error_cls = TransientProviderError if status in TRANSIENT_STATUSES else ProviderError
            raise error_cls(f"Gemini returned HTTP {status}", status=status) from exc
        except httpx.RequestError as exc:
            raise ProviderError(f"Gemini request failed: {exc!r}") from exc
        return response.json()


def error_status(exc: BaseException) -> Optional[int]:
    """First of ``status``, ``code`` or the HTTP response status that reads as an int."""
    candidates = [getattr(exc, "status", None), getattr(exc, "code", None)]
    if isinstance(exc, httpx.HTTPStatusError):
        candidates.append(exc.response.status_code)
    for value in candidates:
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            continue
    return None


def is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TransientProviderError) or error_status(exc) in TRANSIENT_STATUSES


async def invoke_with_retry(
    prompt: str,
    *,
    transport,
    model: str,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """Call the model, retrying 429/503 with linear backoff (1s, 2s, ...)."""
    contents = [{"role": "user", "parts": [{"text": prompt}]}]
    last_error: Optional[BaseException] = None
    for attempt in range(1, max_retries + 1):
        try:
            return await transport.generate_content(model=model, contents=contents)
        except Exception as exc:
            last_error = exc
            if not is_transient(exc) or attempt == max_retries:
                break
            delay = backoff_base * attempt
            logger.warning(
                f"Transient model error (status={error_status(exc)}) on attempt "
                f"{attempt}/{max_retries}; retrying in {delay:.1f}s"
            )
            await sleep(delay)
    raise ModelError(f"Model call failed: {last_error!r}", last_error=last_error) from last_error


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _first(seq: Any) -> Any:
    if isinstance(seq, (list, tuple)) and seq:
        return seq[0]
    return None


def _text_attribute(response: Any) -> Optional[str]:
    text = getattr(response, "text", None)
    return text if isinstance(text, str) else None


def _text_accessor(response: Any) -> Optional[str]:
    text = getattr(response, "text", None)
    if callable(text):
        value = text()
        return value if isinstance(value, str) else None
    return None


def _text_key(response: Any) -> Optional[str]:
    if isinstance(response, dict) and isinstance(response.get("text"), str):
        return response["text"]
    return None


def _first_part(response: Any) -> Optional[str]:
    parts = _get(_get(_first(_get(response, "candidates")), "content"), "parts")
    text = _get(_first(parts), "text")
    return text if isinstance(text, str) else None


def _joined_parts(response: Any) -> Optional[str]:
    parts = _get(_get(_first(_get(response, "candidates")), "content"), "parts") or []
    texts = [_get(p, "text") for p in parts]
    return "\n".join(t for t in texts if isinstance(t, str) and t)


TEXT_EXTRACTORS = (_text_attribute, _text_accessor, _text_key, _first_part, _joined_parts)


def extract_text(response: Any) -> str:
    """Return the first non-empty text found across known response shapes."""
    if response is None:
        return ""
    for extractor in TEXT_EXTRACTORS:
        try:
            text = extractor(response)
        except Exception:
            logger.debug(f"Text extractor {extractor.__name__} failed", exc_info=True)
            continue
        if text and text.strip():
            return text
    return ""


_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


def sanitize_json_text(raw_text: str) -> str:
    cleaned = _LEADING_FENCE.sub("", raw_text or "", count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1).strip()
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]
    return cleaned


def sanitize_and_parse(raw_text: str) -> Dict:
    cleaned = sanitize_json_text(raw_text)
    if not cleaned:
        raise MalformedResponseError("Empty response from LLM")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError("LLM response was not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError("LLM response JSON is not an object")
    return parsed

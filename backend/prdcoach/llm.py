"""
PRD Coach Backend — LLM Interactions

All completion calls go through litellm against the configured AI gateway
(an OpenAI-compatible chat-completions endpoint). Also home to the upstream
error taxonomy and JSON extraction from free-form model replies.
"""

import json
import re
import time
from typing import Iterator

import litellm

from prdcoach.config import Settings, generate_error_code, log

litellm.suppress_debug_info = True
litellm.drop_params = True  # Prevent unsupported-param errors on the gateway

EMPTY_REPLY = ""


# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions
# ─────────────────────────────────────────────────────────────────────────────


class UpstreamError(Exception):
    """The completion API returned a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class UpstreamRateLimited(UpstreamError):
    """HTTP 429 from the completion API. Caller should retry later."""

    pass


class UpstreamQuotaExhausted(UpstreamError):
    """HTTP 402 from the completion API. Credits must be replenished."""

    pass


class MalformedUpstreamContent(Exception):
    """Model reply could not be coerced into the expected JSON schema."""

    def __init__(self, raw_output: str, reason: str):
        self.raw_output = raw_output
        self.reason = reason
        super().__init__(f"Malformed upstream content: {reason}")


def _status_code_of(error: Exception) -> int | None:
    """Read the HTTP status litellm (or the underlying SDK) attached to an error."""
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def map_upstream_error(error: Exception) -> UpstreamError:
    """Translate a raw client exception into the upstream error taxonomy."""
    if isinstance(error, UpstreamError):
        return error
    status = _status_code_of(error)
    body = str(error)
    if status == 429:
        return UpstreamRateLimited("Upstream rate limit exceeded", status_code=429, body=body)
    if status == 402:
        return UpstreamQuotaExhausted("Upstream credits exhausted", status_code=402, body=body)
    if status is None:
        return UpstreamError("Upstream request failed", body=body)
    return UpstreamError(f"Upstream returned HTTP {status}", status_code=status, body=body)


# ─────────────────────────────────────────────────────────────────────────────
# Gateway Client
# ─────────────────────────────────────────────────────────────────────────────


class CompletionGateway:
    """Single-shot chat-completion client bound to one gateway and credential.

    No retries and no fallback chain: each call makes exactly one request.
    """

    def __init__(self, settings: Settings):
        self.base_url = settings.ai_gateway_base_url
        self._api_key = settings.ai_gateway_api_key
        self.timeout = settings.llm_timeout_seconds

    async def complete(
        self,
        messages: list[dict],
        model: str,
        *,
        temperature: float | None = None,
        max_completion_tokens: int | None = None,
        request_id: str | None = None,
    ) -> str:
        """
        Send one chat-completion request and return the first choice's text.

        Args:
            messages: Role-tagged messages, sent as given.
            model: Gateway model name, e.g. "google/gemini-2.5-flash".
            temperature: Optional sampling temperature.
            max_completion_tokens: Optional output cap.
            request_id: Optional ID for logging correlation.

        Returns:
            Raw content of choices[0].message, or "" if the reply had none.

        Raises:
            UpstreamRateLimited: Gateway answered 429.
            UpstreamQuotaExhausted: Gateway answered 402.
            UpstreamError: Any other non-2xx status or transport failure.
        """
        completion_kwargs = {
            # openai/ routes litellm to an OpenAI-compatible api_base
            "model": f"openai/{model}",
            "messages": messages,
            "api_base": self.base_url,
            "api_key": self._api_key,
            "max_retries": 0,
        }
        if temperature is not None:
            completion_kwargs["temperature"] = temperature
        if max_completion_tokens is not None:
            completion_kwargs["max_completion_tokens"] = max_completion_tokens
        if self.timeout is not None:
            completion_kwargs["timeout"] = self.timeout

        log("INFO", "llm call started", request_id=request_id, model=model)
        start = time.perf_counter()

        try:
            response = await litellm.acompletion(**completion_kwargs)
        except Exception as e:
            mapped = map_upstream_error(e)
            log(
                "ERROR",
                "llm call failed",
                request_id=request_id,
                model=model,
                status=mapped.status_code,
                error=mapped.body[:300],
                error_code=generate_error_code(),
            )
            raise mapped from e

        duration_ms = int((time.perf_counter() - start) * 1000)
        content = EMPTY_REPLY
        if response.choices:
            msg = response.choices[0].message
            if msg.content:
                content = msg.content

        tokens_used = None
        if hasattr(response, "usage") and response.usage:
            tokens_used = getattr(response.usage, "total_tokens", None)

        log(
            "INFO",
            "llm call succeeded",
            request_id=request_id,
            model=model,
            duration_ms=duration_ms,
            tokens_used=tokens_used,
        )
        return content


# ─────────────────────────────────────────────────────────────────────────────
# JSON Extraction
# ─────────────────────────────────────────────────────────────────────────────

_FENCE_PATTERN = re.compile(r"```(?:json)?[ \t]*\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_decoder = json.JSONDecoder()


def _largest_json_object(text: str) -> dict | None:
    """
    Return the largest balanced JSON object found in text, or None.

    Tries a real decode at every '{'. A successful decode consumes its span,
    so nested objects are never reported separately from their parent.
    """
    best: dict | None = None
    best_len = 0
    pos = text.find("{")
    while pos != -1:
        try:
            obj, end = _decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            pos = text.find("{", pos + 1)
            continue
        if isinstance(obj, dict) and end - pos > best_len:
            best, best_len = obj, end - pos
        pos = text.find("{", end)
    return best


def iter_json_objects(text: str) -> Iterator[dict]:
    """
    Yield candidate JSON objects from an LLM reply, most preferred first.

    The largest object inside each ``` fence (optionally tagged json) comes
    first, then the largest balanced object in the whole reply. A fence that a
    string value cuts short can yield a fragment, so callers that validate a
    schema should try the later candidates too.
    """
    if not text or not isinstance(text, str):
        return
    for fenced in _FENCE_PATTERN.findall(text):
        obj = _largest_json_object(fenced)
        if obj is not None:
            yield obj

    obj = _largest_json_object(text)
    if obj is not None:
        yield obj


def extract_json_object(text: str) -> dict:
    """
    Extract a JSON object from an LLM reply that may carry prose or code fences.

    Objects inside an explicit ``` fence (optionally tagged json) win; otherwise
    the largest balanced object anywhere in the reply is used.

    Raises:
        MalformedUpstreamContent: No decodable JSON object in the text.
    """
    if not text or not isinstance(text, str):
        raise MalformedUpstreamContent(str(text or ""), "empty reply")

    for obj in iter_json_objects(text):
        return obj
    raise MalformedUpstreamContent(text, "no JSON object found")

"""
Resilient Chat Client - chat completions with retries, model fallback and
response salvage.

Each request attempt is classified into an AttemptAction. tenacity drives
the retries for a single model; the outer loop walks the model list when a
model is exhausted or rejects the request outright.
"""
from typing import Any, Callable, Dict, List, Optional
import json
import logging
import re
import threading
import time

import requests
from tenacity import Retrying, RetryCallState, retry_if_result, stop_after_attempt

from core.config_loader import LlmConfig
from core.llm.interfaces import (
    AttemptAction,
    AttemptResult,
    ChatClient,
    ChatCompletionResult,
    BACKOFF_EXPONENTIAL,
    BACKOFF_LINEAR,
)

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{.*\}", re.S)
_BARE_NUMBER = re.compile(r"-?\d+(\.\d+)?")


class AllAttemptsFailedError(Exception):
    """Every model and every attempt failed."""

    def __init__(self, message: str, last_error: Optional[Dict[str, Any]] = None,
                 attempts: Optional[Dict[str, int]] = None):
        super().__init__(message)
        self.last_error = last_error or {}
        self.attempts = attempts or {}


class AiRequestCancelled(Exception):
    """The caller gave up on the request (e.g. the AI phase timed out)."""


# ---------------------------------------------------------------------------
# Retry helpers
# ---------------------------------------------------------------------------

def _log_retry(retry_state: RetryCallState) -> None:
    """Log a warning before each retry sleep."""
    result: AttemptResult = retry_state.outcome.result()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    error = result.error or {}
    cause = error.get("reason") or error.get("status")
    logger.warning(
        f"Model {result.model} attempt {retry_state.attempt_number} failed ({cause}). "
        f"Waiting {wait:.1f}s before retry."
    )


def salvage_content(content: str) -> Optional[Any]:
    """Recover a JSON object from free text.

    Tries the greedy outermost {...} block first, then a bare number which
    is wrapped as {"score": n, "raw": content}. Returns None if neither works.
    """
    match = _JSON_BLOCK.search(content)
    if match:
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

    number = _BARE_NUMBER.search(content)
    if number:
        return {"score": float(number.group(0)), "raw": content}
    return None


class ResilientChatClient(ChatClient):
    """
    Chat-completions client over `requests`, tolerant of flaky models.

    Transient failures (429, 5xx, network) back off exponentially on the
    same model; other 4xx move to the next model at once; empty or
    unusable replies back off linearly.
    """

    def __init__(
        self,
        config: Optional[LlmConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], Any]] = None,
    ):
        self.config = config or LlmConfig()
        self.session = session or requests.Session()
        self._sleep = sleep

    # -- request shaping --------------------------------------------------

    def models_to_try(self, preferred_model: Optional[str] = None) -> List[str]:
        preferred = preferred_model or self.config.preferred_model
        defaults = list(self.config.default_models)
        if not preferred:
            return defaults
        return [preferred] + [m for m in defaults if m != preferred]

    def uses_completion_tokens(self, model: str) -> bool:
        return any(marker in model for marker in self.config.completion_token_markers)

    def build_request_body(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": model, "messages": messages}
        if self.uses_completion_tokens(model):
            body["max_completion_tokens"] = self.config.max_tokens
        else:
            body["max_tokens"] = self.config.max_tokens
            body["temperature"] = self.config.temperature
        return body

    # -- single attempt ---------------------------------------------------

    def _attempt(
        self,
        model: str,
        messages: List[Dict[str, str]],
        parse_json: bool,
        cancel_event: Optional[threading.Event],
    ) -> AttemptResult:
        if cancel_event is not None and cancel_event.is_set():
            return AttemptResult(AttemptAction.FATAL, model, error={"reason": "cancelled", "model": model})

        url = f"{self.config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

        try:
            response = self.session.post(
                url,
                json=self.build_request_body(model, messages),
                headers=headers,
                timeout=self.config.request_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.info(f"Model {model} network error: {e}")
            return AttemptResult(
                AttemptAction.RETRY, model,
                error={"reason": "network_error", "model": model, "error": str(e)},
            )

        raw = response.text or ""
        try:
            parsed = json.loads(raw) if raw else None
        except ValueError:
            logger.debug(f"Model {model} returned a non-JSON body: {raw[:200]}")
            parsed = None

        status = response.status_code
        if status < 200 or status >= 300:
            error = {"status": status, "raw": raw, "parsed": parsed, "model": model}
            if status == 429 or status >= 500:
                logger.info(f"Model {model} transient error {status}")
                return AttemptResult(AttemptAction.RETRY, model, error=error)
            logger.info(f"Model {model} client error {status}, trying next model")
            return AttemptResult(AttemptAction.SWITCH_MODEL, model, error=error)

        content = _message_content(parsed)
        if not content or not content.strip():
            return AttemptResult(
                AttemptAction.RETRY, model, raw_response=parsed,
                error={"reason": "empty_content", "model": model, "raw": raw, "parsed": parsed},
                backoff=BACKOFF_LINEAR,
            )

        if not parse_json:
            return AttemptResult(AttemptAction.SUCCESS, model, content=content, raw_response=parsed)

        salvaged = salvage_content(content)
        if salvaged is None:
            return AttemptResult(
                AttemptAction.RETRY, model, raw_response=parsed,
                error={"reason": "invalid_content_format", "model": model, "raw": raw, "parsed": parsed},
                backoff=BACKOFF_LINEAR,
            )
        return AttemptResult(AttemptAction.SUCCESS, model, content=salvaged, raw_response=parsed)

    def _wait_for_attempt(self, retry_state: RetryCallState) -> float:
        result: AttemptResult = retry_state.outcome.result()
        base = self.config.base_backoff_ms / 1000.0
        if result.backoff == BACKOFF_LINEAR:
            return base * retry_state.attempt_number
        return base * (2 ** (retry_state.attempt_number - 1))

    def _sleeper(self, cancel_event: Optional[threading.Event]) -> Callable[[float], Any]:
        if self._sleep is not None:
            return self._sleep
        if cancel_event is not None:
            return cancel_event.wait
        return time.sleep

    # -- public API -------------------------------------------------------

    def complete(
        self,
        messages: List[Dict[str, str]],
        preferred_model: Optional[str] = None,
        parse_json: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatCompletionResult:
        if not self.config.api_key:
            raise ValueError("Missing API key for chat completions")

        attempts: Dict[str, int] = {}
        last_error: Optional[Dict[str, Any]] = None

        for model in self.models_to_try(preferred_model):

            def counted_attempt(model=model):
                attempts[model] = attempts.get(model, 0) + 1
                return self._attempt(model, messages, parse_json, cancel_event)

            retryer = Retrying(
                stop=stop_after_attempt(self.config.max_retries),
                wait=self._wait_for_attempt,
                retry=retry_if_result(lambda r: r.action is AttemptAction.RETRY),
                sleep=self._sleeper(cancel_event),
                before_sleep=_log_retry,
                retry_error_callback=lambda state: state.outcome.result(),
            )
            result: AttemptResult = retryer(counted_attempt)

            if result.action is AttemptAction.SUCCESS:
                logger.info(f"Model {model} succeeded after {attempts[model]} attempt(s)")
                return ChatCompletionResult(
                    model=model,
                    content=result.content,
                    raw_response=result.raw_response,
                    attempts=attempts,
                )

            if result.action is AttemptAction.FATAL:
                raise AiRequestCancelled(f"Chat completion cancelled while trying {model}")

            last_error = result.error
            logger.info(f"Model {model} failed all attempts, trying next model")

        raise AllAttemptsFailedError("All chat completion attempts failed", last_error, attempts)


def _message_content(parsed: Any) -> Optional[str]:
    """Content of the first choice, or None when the body has another shape."""
    if not isinstance(parsed, dict):
        return None
    choices = parsed.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None

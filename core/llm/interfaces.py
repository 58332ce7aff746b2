"""
Chat Client Interface - abstract base for text-generation collaborators.

The scoring service only depends on this interface, so tests and
alternative providers can stand in for the HTTP client.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class AttemptAction(Enum):
    """What the outer loop does after a single request attempt."""
    SUCCESS = "success"
    RETRY = "retry"
    SWITCH_MODEL = "switch_model"
    FATAL = "fatal"


BACKOFF_EXPONENTIAL = "exponential"
BACKOFF_LINEAR = "linear"


@dataclass
class AttemptResult:
    """
    Outcome of one request to one model.

    `backoff` selects the wait schedule when the action is RETRY:
    exponential for transient HTTP/network failures, linear for empty or
    unusable content.
    """
    action: AttemptAction
    model: str
    content: Any = None
    raw_response: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    backoff: str = BACKOFF_EXPONENTIAL


@dataclass
class ChatCompletionResult:
    model: str
    content: Any
    raw_response: Optional[Dict[str, Any]] = None
    attempts: Dict[str, int] = field(default_factory=dict)


class ChatClient(ABC):
    """
    Abstract interface for chat-completion providers.
    """

    @abstractmethod
    def complete(
        self,
        messages: List[Dict[str, str]],
        preferred_model: Optional[str] = None,
        parse_json: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatCompletionResult:
        """
        Send a chat completion, retrying and falling back across models.

        Args:
            messages: OpenAI-style role/content messages
            preferred_model: Model to try before the configured defaults
            parse_json: Parse (or salvage) the reply content as JSON
            cancel_event: When set, pending backoff sleeps wake and the call aborts
        """
        pass

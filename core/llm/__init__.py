"""LLM Module - chat client, prompts and the per-user circuit breaker."""
from core.llm.interfaces import ChatClient, AttemptAction, AttemptResult, ChatCompletionResult
from core.llm.client import ResilientChatClient, AllAttemptsFailedError, AiRequestCancelled

__all__ = [
    'ChatClient',
    'AttemptAction',
    'AttemptResult',
    'ChatCompletionResult',
    'ResilientChatClient',
    'AllAttemptsFailedError',
    'AiRequestCancelled',
]

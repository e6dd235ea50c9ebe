"""Chat-completion client for Interview Coach."""

from .chat_client import ChatCompletionClient, ChatCompletionError, ChatMessage

__all__ = [
    "ChatCompletionClient",
    "ChatCompletionError",
    "ChatMessage",
]

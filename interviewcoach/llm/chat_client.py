"""Chat-completion client for sending role-tagged prompts and getting replies."""

import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Dict, Any

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "chatgpt-4o-latest"
DEFAULT_BASE_URL = "https://api.openai.com/v1/chat/completions"


class ChatCompletionError(Exception):
    """Raised when the completion service cannot produce a reply."""


@dataclass
class ChatMessage:
    """One role-tagged message of a conversation."""
    role: str  # "system" | "user" | "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class ChatCompletionClient:
    """Client for a hosted chat-completion endpoint.

    Constructed explicitly with its API key and passed to whatever needs to
    talk to the model.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: Optional[float] = None,
    ):
        """Initialize chat-completion client.

        Args:
            api_key: API key for the completion service
            model: Model identifier sent with every request
            base_url: Full URL of the chat-completions endpoint
            request_timeout: Total seconds per request, None for the aiohttp default
        """
        if not api_key:
            raise ValueError("API key is required - cannot create completion client without it")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.request_timeout = request_timeout

        logger.info(f"ChatCompletionClient initialized with model: {model}")

    async def complete(self, messages: List[ChatMessage]) -> str:
        """Send the conversation and return the first choice's message text.

        Args:
            messages: Ordered role-tagged messages

        Returns:
            Message content of the first choice, untrimmed

        Raises:
            ChatCompletionError: If the request fails or the reply is malformed
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data: Dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_dict() for message in messages],
        }

        session_kwargs: Dict[str, Any] = {}
        if self.request_timeout:
            session_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.request_timeout)

        logger.debug(f"Sending {len(messages)} messages to {self.model}")
        try:
            async with aiohttp.ClientSession(**session_kwargs) as session:
                async with session.post(self.base_url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ChatCompletionError(f"Completion API error: {response.status} - {error_text}")

                    try:
                        result = await response.json(content_type=None)
                    except ValueError as e:
                        body = await response.text()
                        raise ChatCompletionError(f"Completion API returned non-JSON body: {body[:200]!r}") from e
        except aiohttp.ClientError as e:
            raise ChatCompletionError(f"Completion API request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise ChatCompletionError("Completion API request timed out") from e

        return self._extract_content(result)

    def _extract_content(self, result: Any) -> str:
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatCompletionError(f"Malformed completion payload: {result!r}") from e
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ChatCompletionError(f"Unexpected message content type: {type(content).__name__}")
        return content

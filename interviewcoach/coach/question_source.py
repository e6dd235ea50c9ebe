"""Interview question generation."""

import logging
from typing import Optional

from ..llm.chat_client import ChatCompletionClient, ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "JavaScript"


def build_question_prompt(topic: str = DEFAULT_TOPIC) -> str:
    return (
        "You are an AI interview coach. "
        f"Just generate a random technical {topic} interview question. No explanation."
    )


class QuestionSource:
    """Asks the completion service for a random interview question."""

    def __init__(self, client: ChatCompletionClient, topic: str = DEFAULT_TOPIC):
        self.client = client
        self.topic = topic

    async def request_question(self) -> Optional[str]:
        """Request one question.

        Returns:
            The trimmed question text, or None if the model replied with nothing

        Raises:
            ChatCompletionError: If the completion request fails
        """
        messages = [ChatMessage(role="system", content=build_question_prompt(self.topic))]
        reply = await self.client.complete(messages)
        question = reply.strip()
        if not question:
            logger.warning("Completion service returned an empty question")
            return None

        logger.info(f"Generated {self.topic} question ({len(question)} chars)")
        return question

"""Answer evaluation: prompt construction, payload extraction and validation."""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..llm.chat_client import ChatCompletionClient, ChatMessage
from ..models.feedback import Feedback

logger = logging.getLogger(__name__)

EVALUATOR_SYSTEM_PROMPT = "You are an AI interview evaluator."

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


class UnparseableEvaluationError(Exception):
    """The evaluator reply did not contain a valid feedback payload."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def build_evaluation_prompt(question: str, answer: str, topic: str = "JavaScript") -> str:
    """User prompt embedding question and answer verbatim."""
    return f"""You are an expert interviewer. Evaluate the following answer to a {topic} interview question.
Question: {question}
Candidate's Answer: {answer}
Evaluate the user's answer and return a JSON object inside a ```json fenced block:
```json
{{
  "correctness": <a whole number from 0 to 5>,
  "completeness": <a whole number from 0 to 5>,
  "feedback": "Detailed feedback of around 150 words based on the answer"
}}
```"""


def extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Pull the JSON object out of free-form model output.

    A fenced ```json block wins; otherwise the first brace-delimited substring
    that decodes as a JSON object is used.

    Returns:
        The decoded object, or None if there is none
    """
    if not text:
        return None

    fenced = _FENCED_JSON.search(text)
    if fenced:
        try:
            data = json.loads(fenced.group(1))
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in fenced block: {e}")
        else:
            if isinstance(data, dict):
                return data

    decoder = json.JSONDecoder()
    position = text.find("{")
    while position != -1:
        try:
            data, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(data, dict):
                return data
        position = text.find("{", position + 1)

    if "{" in text:
        logger.error("Invalid JSON: no brace-delimited substring decodes as an object")
    return None


class Evaluator:
    """Scores an answer with the completion service."""

    def __init__(self, client: ChatCompletionClient, topic: str = "JavaScript"):
        self.client = client
        self.topic = topic

    async def evaluate(self, question: str, answer: str) -> Optional[Feedback]:
        """Evaluate one answer.

        Returns:
            Validated Feedback, or None if the answer is empty (nothing is sent)

        Raises:
            ChatCompletionError: If the completion request fails
            UnparseableEvaluationError: If the reply has no valid feedback payload
        """
        if not answer or not answer.strip():
            logger.warning("Empty transcript. Skipping feedback.")
            return None

        messages = [
            ChatMessage(role="system", content=EVALUATOR_SYSTEM_PROMPT),
            ChatMessage(role="user", content=build_evaluation_prompt(question, answer, self.topic)),
        ]
        response_text = await self.client.complete(messages)
        return self.parse_feedback(response_text)

    def parse_feedback(self, response_text: str) -> Feedback:
        payload = extract_json(response_text)
        if payload is None:
            raise UnparseableEvaluationError("No JSON object in evaluator reply", response_text)

        try:
            feedback = Feedback.model_validate(payload)
        except ValidationError as e:
            raise UnparseableEvaluationError(
                f"Evaluator reply failed validation: {e.error_count()} error(s)", response_text
            ) from e

        logger.info(f"Evaluation parsed: correctness={feedback.correctness}, "
                    f"completeness={feedback.completeness}")
        return feedback

"""Unit tests for QuestionSource."""

import asyncio

import pytest

from interviewcoach.coach.question_source import QuestionSource
from interviewcoach.llm.chat_client import ChatCompletionError


@pytest.mark.unit
class TestQuestionSource:
    """Test cases for QuestionSource."""

    def test_returns_trimmed_question(self, chat_client_factory):
        client = chat_client_factory(["  What is event delegation?\n"])

        question = asyncio.run(QuestionSource(client).request_question())

        assert question == "What is event delegation?"

    def test_sends_single_system_prompt(self, chat_client_factory):
        client = chat_client_factory(["Q"])

        asyncio.run(QuestionSource(client, topic="Rust").request_question())

        messages = client.calls[0]
        assert len(messages) == 1
        assert messages[0].role == "system"
        assert "random technical Rust interview question" in messages[0].content
        assert "No explanation." in messages[0].content

    def test_empty_reply_returns_none(self, chat_client_factory):
        client = chat_client_factory(["   "])

        assert asyncio.run(QuestionSource(client).request_question()) is None

    def test_failure_propagates(self, chat_client_factory):
        client = chat_client_factory([ChatCompletionError("Completion API request failed")])

        with pytest.raises(ChatCompletionError):
            asyncio.run(QuestionSource(client).request_question())

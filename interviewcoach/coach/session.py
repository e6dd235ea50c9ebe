"""Coach session: the question, listen and evaluate lifecycle of the single view."""

import logging
from typing import Optional

from .evaluator import Evaluator, UnparseableEvaluationError
from .question_source import QuestionSource
from ..llm.chat_client import ChatCompletionError
from ..models.events import EndReason, SpeechEndEvent, SpeechResultEvent
from ..models.ui import CoachStatus, ViewState
from ..speech.recognizer import SpeechRecognizer

logger = logging.getLogger(__name__)

NO_ANSWER_NOTICE = "No answer detected."
FEEDBACK_ERROR_NOTICE = "Something went wrong while fetching feedback."


class CoachSession:
    """State machine behind the coach view.

    All methods must be called from the event loop thread. Speech events
    arrive from recognizer threads and have to be marshalled onto the loop
    before handle_result/handle_end are called.

    Two counters keep late arrivals harmless: the capture generation returned
    by the recognizer identifies the recognition session whose events are
    accepted, and the epoch changes whenever a new question is requested so
    an evaluation that finishes afterwards is dropped.
    """

    def __init__(
        self,
        question_source: QuestionSource,
        evaluator: Evaluator,
        recognizer: Optional[SpeechRecognizer] = None,
    ):
        self.question_source = question_source
        self.evaluator = evaluator
        self.recognizer = recognizer
        self.status = CoachStatus(capture_available=recognizer is not None)

        self._capture_generation: Optional[int] = None
        self._epoch = 0

    @property
    def state(self) -> ViewState:
        return self.status.state

    async def load_question(self) -> None:
        """Fetch a new question; also serves the "next question" control."""
        if self.status.state == ViewState.LISTENING:
            logger.warning("Cannot load a new question while listening")
            return

        self._epoch += 1
        epoch = self._epoch
        self.status.state = ViewState.LOADING_QUESTION
        self.status.question_loading = True
        self.status.feedback = None
        self.status.feedback_loading = False
        self.status.notice = None

        question = None
        try:
            question = await self.question_source.request_question()
        except ChatCompletionError as e:
            logger.error(f"Error generating question: {e}")
        finally:
            if epoch != self._epoch:
                logger.debug("Question request superseded by a newer one")
            else:
                if question:
                    self.status.question = question
                self.status.question_loading = False
                self.status.state = ViewState.IDLE

    def start_answer(self) -> bool:
        """Clear the transcript and start capturing an answer.

        Returns:
            True if capture started
        """
        if self.recognizer is None:
            logger.debug("Speech capture unavailable, ignoring start")
            return False
        if self.status.state != ViewState.IDLE:
            logger.warning(f"Cannot start answering from state {self.status.state.value}")
            return False
        if not self.status.question:
            logger.warning("No question to answer yet")
            return False

        self.status.transcript = ""
        self.status.feedback = None
        self.status.notice = None
        self.status.stop_requested = False
        self.status.duration_seconds = 0.0
        self.status.peak_level = 0.0
        self.status.state = ViewState.LISTENING

        generation = self.recognizer.start()
        if generation is None:
            logger.warning("Speech recognizer busy, answer not started")
            self.status.state = ViewState.IDLE
            return False

        self._capture_generation = generation
        logger.info(f"Listening for answer (generation {generation})")
        return True

    def stop_answer(self) -> None:
        """Manual submit. The end event that follows triggers evaluation."""
        if self.status.state != ViewState.LISTENING:
            logger.warning("No answer in progress")
            return
        if self.status.stop_requested:
            logger.warning("Answer already submitted")
            return

        self.status.stop_requested = True
        self.recognizer.stop()

    def handle_result(self, event: SpeechResultEvent) -> None:
        """Store the transcript of the current recognition session."""
        if event.generation != self._capture_generation or self.status.state != ViewState.LISTENING:
            logger.debug(f"Ignoring stale speech result for generation {event.generation}")
            return

        self.status.transcript = event.transcript
        logger.info(f"Transcript received ({len(event.transcript)} chars)")

    async def handle_end(self, event: SpeechEndEvent) -> None:
        """End of a recognition session: evaluate, or explain why not."""
        if event.generation != self._capture_generation or self.status.state != ViewState.LISTENING:
            logger.debug(f"Ignoring end event for generation {event.generation}")
            return

        self.status.stop_requested = False

        if event.reason == EndReason.ABORTED:
            logger.info(f"Recognition aborted (generation {event.generation})")
            self.status.state = ViewState.IDLE
            return

        if event.error:
            logger.error(f"Speech recognition error: {event.error}")

        transcript = self.status.transcript
        if not transcript.strip():
            logger.warning(f"No answer detected ({event.reason.value} end)")
            self.status.notice = NO_ANSWER_NOTICE
            self.status.state = ViewState.IDLE
            return

        await self._evaluate(event.generation, transcript)

    async def _evaluate(self, generation: int, answer: str) -> None:
        logger.info(f"Evaluating answer for generation {generation}")
        self.status.state = ViewState.EVALUATING
        self.status.feedback_loading = True
        epoch = self._epoch

        feedback = None
        notice = FEEDBACK_ERROR_NOTICE
        try:
            feedback = await self.evaluator.evaluate(self.status.question, answer)
            notice = None
        except UnparseableEvaluationError as e:
            logger.warning(f"Could not parse feedback from evaluator response: {e} - {e.raw_text!r}")
            notice = None
        except ChatCompletionError as e:
            logger.error(f"Error fetching feedback: {e}")
        finally:
            if epoch != self._epoch:
                logger.info("Discarding evaluation for a question that is no longer shown")
            else:
                self.status.feedback_loading = False
                self.status.notice = notice
                if feedback is not None:
                    self.status.feedback = feedback
                    self.status.state = ViewState.SHOWING_FEEDBACK
                else:
                    self.status.state = ViewState.IDLE

    def reattempt(self) -> bool:
        """Clear feedback and transcript and listen again for the same question."""
        if self.status.state != ViewState.SHOWING_FEEDBACK:
            logger.warning("Nothing to reattempt")
            return False

        self.status.feedback = None
        self.status.transcript = ""
        self.status.state = ViewState.IDLE
        return self.start_answer()

    def refresh_capture_stats(self) -> None:
        """Copy live capture statistics into the status while listening."""
        if self.recognizer is None or self.status.state != ViewState.LISTENING:
            return
        stats = self.recognizer.get_capture_stats()
        self.status.duration_seconds = stats.duration_seconds
        self.status.peak_level = stats.peak_level

    def close(self) -> None:
        """Abort capture if it is still running."""
        if self.recognizer is not None and self.recognizer.is_active:
            self.recognizer.abort()

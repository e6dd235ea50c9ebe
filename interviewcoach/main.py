"""Main application entry point for Interview Coach."""

import sys
import asyncio
import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Optional, Set

from pubsub import pub

from interviewcoach import __version__
from interviewcoach.coach import CoachSession, Evaluator, QuestionSource
from interviewcoach.llm import ChatCompletionClient
from interviewcoach.models.events import SpeechEndEvent, SpeechResultEvent
from interviewcoach.models.ui import CoachStatus, ViewState
from interviewcoach.speech import SpeechEventPublisher, SpeechUnavailableError, build_speech_recognizer
from interviewcoach.ui import CoachScreen, create_input_handler

from .config import InterviewCoachConfig

logger = logging.getLogger(__name__)

SUBMIT_KEYS = (" ", "\r", "\n")
QUIT_KEYS = ("q", "\x03")


class CoachApp:
    """Wires the coach session to speech events, keyboard input and the screen.

    Everything that touches session state runs on the asyncio loop; the
    keyboard thread and the speech threads hop over with call_soon_threadsafe.
    """

    def __init__(self, config: InterviewCoachConfig):
        self.config = config
        self.should_exit = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.recognizer = None
        self.input_handler = None
        self._tasks: Set[asyncio.Task] = set()
        self._last_rendered: Optional[CoachStatus] = None

    def init(self) -> None:
        logger.info("Initializing services...")

        self.client = ChatCompletionClient(
            api_key=self.config.get_api_key(),
            model=self.config.get('openai.model', 'chatgpt-4o-latest'),
            base_url=self.config.get('openai.base_url'),
            request_timeout=self.config.get('openai.request_timeout_seconds'),
        )
        topic = self.config.get('interview.topic', 'JavaScript')
        self.question_source = QuestionSource(self.client, topic=topic)
        self.evaluator = Evaluator(self.client, topic=topic)

        self.publisher = SpeechEventPublisher()
        try:
            self.recognizer = build_speech_recognizer(self.config, self.publisher)
        except SpeechUnavailableError as e:
            logger.error(f"Speech recognition not supported: {e}")
            self.recognizer = None

        self.session = CoachSession(self.question_source, self.evaluator, self.recognizer)
        self.screen = CoachScreen()

        pub.subscribe(self._on_speech_result, self.publisher.result_topic)
        pub.subscribe(self._on_speech_end, self.publisher.end_topic)
        logger.info(f"Services ready (topic={topic}, speech={'on' if self.recognizer else 'off'})")

    async def run(self) -> None:
        self.loop = asyncio.get_running_loop()
        refresh_interval = self.config.get('ui.refresh_interval_seconds', 0.2)

        self.input_handler = create_input_handler(self._on_key)
        self.input_handler.start()
        self._spawn(self.session.load_question)

        try:
            while not self.should_exit:
                self.session.refresh_capture_stats()
                self._render()
                await asyncio.sleep(refresh_interval)
        finally:
            self.cleanup()

    def _render(self) -> None:
        snapshot = dataclasses.replace(self.session.status)
        if snapshot == self._last_rendered:
            return
        self.screen.show(snapshot)
        self._last_rendered = snapshot

    def _spawn(self, coroutine_function, *args) -> None:
        task = self.loop.create_task(coroutine_function(*args))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    # Speech threads

    def _on_speech_result(self, event: SpeechResultEvent) -> None:
        self.loop.call_soon_threadsafe(self.session.handle_result, event)

    def _on_speech_end(self, event: SpeechEndEvent) -> None:
        self.loop.call_soon_threadsafe(self._spawn, self.session.handle_end, event)

    # Keyboard thread

    def _on_key(self, key: str) -> bool:
        if key in QUIT_KEYS:
            self.loop.call_soon_threadsafe(self._request_exit)
            return False
        self.loop.call_soon_threadsafe(self._handle_key, key)
        return True

    def _request_exit(self) -> None:
        logger.info("Quit requested")
        self.should_exit = True

    def _handle_key(self, key: str) -> None:
        if key in SUBMIT_KEYS:
            if self.session.state == ViewState.LISTENING:
                self.session.stop_answer()
            else:
                self.session.start_answer()
        elif key == "r":
            self.session.reattempt()
        elif key == "n":
            self._spawn(self.session.load_question)
        else:
            logger.debug(f"Unbound key {key!r}")

    def cleanup(self) -> None:
        if self.input_handler:
            self.input_handler.stop()

        pub.unsubscribe(self._on_speech_result, self.publisher.result_topic)
        pub.unsubscribe(self._on_speech_end, self.publisher.end_topic)

        self.session.close()
        if self.recognizer:
            self.recognizer.shutdown()

        for task in self._tasks:
            task.cancel()
        logger.info("Interview Coach shut down")


def setup_logging(config: InterviewCoachConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/interviewcoach.log')
    console_output = config.get('logging.console_output', False)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config, it draws over the screen
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Interview Coach starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for Interview Coach."""
    parser = argparse.ArgumentParser(
        description="Interview Coach - answer interview questions out loud and get scored",
        epilog="Keys: space=Start/Submit answer, r=Reattempt, n=Next question, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: interviewcoach.yaml if present)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--topic",
        type=str,
        help="Interview topic for generated questions (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Interview Coach v{__version__}"
    )

    args = parser.parse_args()

    try:
        config = InterviewCoachConfig(args.config)
        if args.topic:
            config.set('interview.topic', args.topic)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

        app = CoachApp(config)
        app.init()
        asyncio.run(app.run())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

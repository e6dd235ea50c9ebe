"""Speech event publisher for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.events import SpeechEndEvent, SpeechResultEvent

logger = logging.getLogger(__name__)

SPEECH_RESULT_TOPIC = "speech.result"
SPEECH_END_TOPIC = "speech.end"


class SpeechEventPublisher:
    """Publishes recognition results and end-of-session events using pubsub.pub."""

    def __init__(self, result_topic: str = SPEECH_RESULT_TOPIC, end_topic: str = SPEECH_END_TOPIC):
        """Initialize speech event publisher.

        Args:
            result_topic: Pub/sub topic name for transcript results
            end_topic: Pub/sub topic name for end-of-session events
        """
        self.result_topic = result_topic
        self.end_topic = end_topic
        logger.info(f"SpeechEventPublisher initialized with topics: {result_topic}, {end_topic}")

    def publish_result(self, event: SpeechResultEvent) -> None:
        """Publish a final transcript for one recognition session."""
        pub.sendMessage(self.result_topic, event=event)
        logger.debug(f"Published speech result for generation {event.generation}")

    def publish_end(self, event: SpeechEndEvent) -> None:
        """Publish the end of one recognition session."""
        pub.sendMessage(self.end_topic, event=event)
        logger.debug(f"Published speech end for generation {event.generation} ({event.reason.value})")

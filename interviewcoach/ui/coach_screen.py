"""Terminal rendering of the coach view."""

import logging
from typing import List, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.align import Align

from ..models.ui import CoachStatus, ViewState

logger = logging.getLogger(__name__)

SCORE_SEGMENTS = 5


def score_bar(score: int, filled_style: str) -> Text:
    """Five segments; segment i is filled when i < score."""
    bar = Text()
    for i in range(SCORE_SEGMENTS):
        if i < score:
            bar.append("█", style=filled_style)
        else:
            bar.append("█", style="grey85")
        bar.append(" ")
    return bar


def level_meter(level: float, width: int = 20) -> str:
    filled = int(max(0.0, min(level, 1.0)) * width)
    return "█" * filled + " " * (width - filled)


class CoachScreen:
    """Renders CoachStatus to the console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show(self, status: CoachStatus) -> None:
        """Redraw the whole view."""
        self.console.clear()
        self.console.print(self.build(status))

    def build(self, status: CoachStatus) -> RenderableType:
        sections: List[RenderableType] = [self._question_panel(status)]

        if status.feedback_loading:
            sections.append(Panel(Align.center(Text("Evaluating your answer...", style="bold blue")),
                                  border_style="blue"))
        elif status.feedback is not None:
            sections.append(self._feedback_panel(status))

        if status.notice:
            sections.append(Text(f"⚠️  {status.notice}", style="bold yellow"))

        sections.append(self._controls(status))
        return Group(*sections)

    def _question_panel(self, status: CoachStatus) -> Panel:
        body: List[RenderableType] = []
        if status.question_loading:
            body.append(Text("Loading question...", style="italic"))
        else:
            body.append(Text(status.question, style="bold"))

        body.append(Text())
        body.append(Text("Record your answer"))
        body.append(Text("Try to answer", style="dim"))

        if status.state == ViewState.LISTENING:
            if status.stop_requested:
                body.append(Text("⏳ Transcribing...", style="bold yellow"))
            else:
                body.append(Text(
                    f"🔴 Listening {status.duration_seconds:.1f}s  [{level_meter(status.peak_level)}]",
                    style="bold red",
                ))

        if status.transcript:
            body.append(Text())
            body.append(Text(status.transcript))

        return Panel(Group(*body), title="🎙️  Interview Coach", border_style="cyan")

    def _feedback_panel(self, status: CoachStatus) -> Panel:
        feedback = status.feedback

        scores = Table.grid(padding=(0, 2))
        scores.add_column()
        scores.add_column()
        scores.add_column()
        scores.add_row("Correctness:", str(feedback.correctness), score_bar(feedback.correctness, "blue"))
        scores.add_row("Completeness:", str(feedback.completeness), score_bar(feedback.completeness, "green"))

        body = Group(
            Align.center(Text("Let's see how you answered:")),
            Panel(Text(feedback.feedback), border_style="dim"),
            scores,
        )
        return Panel(body, title="Feedback", border_style="green")

    def _controls(self, status: CoachStatus) -> Text:
        controls = Text()

        if status.feedback is None and status.capture_available:
            if status.state == ViewState.LISTENING:
                controls.append("[space] Submit Answer", style="bold white on black")
            else:
                controls.append("[space] Start Answering", style="bold white on blue")
            controls.append("  ")

        if status.feedback is not None:
            controls.append("[r] Reattempt question", style="bold white on black")
            controls.append("  ")

        if status.state != ViewState.LISTENING:
            controls.append("[n] Next Question", style="bold")
            controls.append("  ")

        controls.append("[q] Quit", style="bold red")
        return controls

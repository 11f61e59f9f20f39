import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .attempts import AttemptStore, already_played, marker_outcome, record_attempt
from .backend import Backend, BackendError
from .classify import WindowState, classify_window, in_range
from .config import QuizConfig
from .draw import pick_winner_random
from .ipinfo import Visitor
from .questions import question_for_day
from .schemas import ArchiveItem, Question, Winner
from .utils_time import Clock, day_index_from_start

log = logging.getLogger(__name__)

CORRECT = "correct"
INCORRECT = "incorrect"
ENTERED = "entered"


@dataclass
class PageView:
    state: WindowState
    day_index: int
    now: datetime
    archive: list[ArchiveItem] = field(default_factory=list)
    winner: Optional[Winner] = None
    no_entries: bool = False
    question: Optional[Question] = None
    already_played: bool = False


@dataclass
class AnswerResult:
    state: WindowState
    day_index: int
    already_played: bool = False
    choice: Optional[int] = None
    correct: Optional[bool] = None
    explain: str = ""

    @property
    def accepted(self) -> bool:
        return self.correct is not None


class EntryStatus(str, Enum):
    SAVED = "saved"
    FAILED = "failed"
    EMPTY_NAME = "empty_name"
    NOT_ELIGIBLE = "not_eligible"
    ALREADY_ENTERED = "already_entered"


@dataclass
class EntryResult:
    status: EntryStatus
    day_index: int
    name: str = ""


class DailyWindowController:
    """
    Decides what a visitor sees for the current moment and runs the
    answer / entry flow. Knows nothing about markup: the render module
    turns its results into payloads.

    Backend calls are awaited one after another, never concurrently.
    """

    def __init__(
        self,
        config: QuizConfig,
        backend: Backend,
        clock: Clock,
        attempts: AttemptStore,
        questions: Sequence[Question],
        rng: random.Random | None = None,
    ):
        self.config = config
        self.backend = backend
        self.clock = clock
        self.attempts = attempts
        self.questions = questions
        self.rng = rng

    def current(self) -> tuple[datetime, int]:
        now = self.clock.now()
        return now, day_index_from_start(self.config.start_date, now)

    async def classify(self, now: datetime, day_index: int) -> tuple[WindowState, Optional[Winner]]:
        cfg = self.config
        winner = None
        # no winner lookup for days outside the quiz
        if in_range(day_index, cfg.total_days):
            winner = await self.backend.get_winner(day_index)
        state = classify_window(
            day_index, now.hour, cfg.total_days, cfg.open_hour, cfg.close_hour,
            has_winner=winner is not None,
        )
        log.debug("day %s at %s classified as %s", day_index, now.isoformat(), state.value)
        return state, winner

    async def archive(self) -> list[ArchiveItem]:
        items = await self.backend.get_winners_archive(self.config.total_days)
        return sorted(items, key=lambda x: x.day_index)

    async def load_page(self, visitor: Visitor) -> PageView:
        now, idx = self.current()
        view = PageView(state=WindowState.NOT_STARTED, day_index=idx, now=now)
        view.archive = await self.archive()
        view.state, view.winner = await self.classify(now, idx)

        if view.state is WindowState.WINDOW_JUST_CLOSED:
            view.winner = await self.draw(idx)
            view.no_entries = view.winner is None
        elif view.state is WindowState.OPEN:
            if already_played(self.attempts, idx, visitor):
                view.already_played = True
            else:
                view.question = question_for_day(self.questions, idx)
        return view

    async def draw(self, day_index: int) -> Optional[Winner]:
        entries = await self.backend.get_entries(day_index)
        winner = pick_winner_random(entries, self.rng)
        if winner is None:
            log.info("no valid entries for day %s, no winner drawn", day_index)
            return None
        ack = await self.backend.set_winner(day_index, winner)
        if ack and ack.get("existing"):
            # another request stored its winner first, that record stands
            stored = await self.backend.get_winner(day_index)
            if stored is not None:
                return stored
        log.info("day %s winner drawn from %d entries", day_index, len(entries))
        return winner

    async def answer(self, visitor: Visitor, choice: int) -> AnswerResult:
        now, idx = self.current()
        state, _ = await self.classify(now, idx)
        result = AnswerResult(state=state, day_index=idx)
        if state is not WindowState.OPEN:
            return result
        if already_played(self.attempts, idx, visitor):
            result.already_played = True
            return result

        q = question_for_day(self.questions, idx)
        if not 0 <= choice < len(q.choices):
            raise ValueError(f"choice must be between 0 and {len(q.choices) - 1}")
        correct = choice == q.answer_index
        record_attempt(self.attempts, idx, visitor, CORRECT if correct else INCORRECT)
        result.choice = choice
        result.correct = correct
        if not correct:
            result.explain = q.explain
        return result

    async def submit_entry(self, visitor: Visitor, day_index: int, name: str) -> EntryResult:
        name = (name or "").strip()
        if not name:
            return EntryResult(EntryStatus.EMPTY_NAME, day_index)
        outcome = marker_outcome(self.attempts, day_index, visitor)
        if outcome == ENTERED:
            return EntryResult(EntryStatus.ALREADY_ENTERED, day_index, name)
        if outcome != CORRECT:
            return EntryResult(EntryStatus.NOT_ELIGIBLE, day_index, name)
        try:
            await self.backend.add_entry(day_index, name, visitor.ip)
        except BackendError:
            log.warning("could not save entry for day %s", day_index, exc_info=True)
            return EntryResult(EntryStatus.FAILED, day_index, name)
        # one entry per correct answer
        record_attempt(self.attempts, day_index, visitor, ENTERED)
        log.info("entry recorded for day %s", day_index)
        return EntryResult(EntryStatus.SAVED, day_index, name)

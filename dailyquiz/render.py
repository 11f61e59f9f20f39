"""Turns controller results into the JSON payloads the widget front end draws."""

from string import ascii_uppercase

from .classify import WindowState
from .config import QuizConfig
from .controller import AnswerResult, EntryResult, EntryStatus, PageView
from .schemas import ArchiveItem
from .utils_time import fmt_range

CORRECT_TEXT = "Correct. Nice work."
NO_ENTRIES_TEXT = "Entries are closed for today. No valid entries were recorded."
RETRY_LATER_TEXT = "Sorry, there was a problem saving your entry. Please try again later."


def choice_letter(i: int) -> str:
    return ascii_uppercase[i] if i < len(ascii_uppercase) else str(i + 1)

def status_pill(state: WindowState, open_at: str) -> dict:
    if state is WindowState.OPEN:
        return {"kind": "open", "text": "Open"}
    if state is WindowState.NOT_STARTED:
        return {"kind": "wait", "text": "Not started"}
    if state is WindowState.WAITING:
        return {"kind": "wait", "text": f"Opens at {open_at}"}
    return {"kind": "closed", "text": "Closed"}

def day_label(day_index: int, total_days: int) -> str:
    return f"Day {min(max(day_index + 1, 0), total_days)} of {total_days}"

def window_label(cfg: QuizConfig) -> str:
    open_at, close_at = fmt_range(cfg.open_hour, cfg.close_hour)
    return f"Today: {open_at}–{close_at} ({cfg.tz})"

def render_archive(items: list[ArchiveItem]) -> list[dict]:
    return [
        {"dayIndex": x.day_index, "label": f"Day {x.day_index + 1}", "name": x.winner.name}
        for x in sorted(items, key=lambda x: x.day_index)
    ]

def _notice(view: PageView, cfg: QuizConfig, open_at: str) -> str | None:
    state = view.state
    if state is WindowState.NOT_STARTED:
        return f"First question unlocks at {open_at} in {cfg.tz}. Check back then."
    if state is WindowState.FINISHED:
        return f"The {cfg.total_days}-day quiz is complete. Thanks for playing."
    if state is WindowState.WAITING:
        return f"Today’s question unlocks at {open_at}. See you then."
    if state is WindowState.WINDOW_JUST_CLOSED and view.no_entries:
        return NO_ENTRIES_TEXT
    if state is WindowState.OPEN and view.already_played:
        return f"Back again tomorrow at {open_at} for a fresh question."
    return None

def render_page(view: PageView, cfg: QuizConfig) -> dict:
    open_at, _ = fmt_range(cfg.open_hour, cfg.close_hour)
    out = {
        "state": view.state.value,
        "dayIndex": view.day_index,
        "now": view.now.isoformat(),
        "status": status_pill(view.state, open_at),
        "dayLabel": day_label(view.day_index, cfg.total_days),
        "windowLabel": window_label(cfg),
        "notice": _notice(view, cfg, open_at),
        "archive": render_archive(view.archive),
        "winner": view.winner.name if view.winner else None,
        "question": None,
    }
    if view.state is WindowState.OPEN:
        if view.already_played:
            out["question"] = {"text": "You’ve already taken today’s quiz on this connection.", "choices": []}
        elif view.question is not None:
            out["question"] = {
                "text": view.question.question,
                "choices": [
                    {"index": i, "letter": choice_letter(i), "text": c}
                    for i, c in enumerate(view.question.choices)
                ],
            }
    return out

def render_answer(result: AnswerResult, cfg: QuizConfig) -> dict:
    open_at, _ = fmt_range(cfg.open_hour, cfg.close_hour)
    out = {
        "state": result.state.value,
        "dayIndex": result.day_index,
        "accepted": result.accepted,
        "alreadyPlayed": result.already_played,
        "choice": result.choice,
        "correct": result.correct,
        "feedback": None,
        "notice": None,
        "showEntryForm": False,
    }
    if result.already_played:
        out["notice"] = f"Back again tomorrow at {open_at} for a fresh question."
    elif result.correct:
        out["feedback"] = CORRECT_TEXT
        out["showEntryForm"] = True
    elif result.correct is False:
        out["feedback"] = f"Not quite. {result.explain}".strip()
        out["notice"] = f"Come back tomorrow at {open_at} for another go."
    return out

def render_entry(result: EntryResult, cfg: QuizConfig) -> dict:
    _, close_at = fmt_range(cfg.open_hour, cfg.close_hour)
    out = {"status": result.status.value, "dayIndex": result.day_index, "message": None, "focus": None}
    if result.status is EntryStatus.EMPTY_NAME:
        out["focus"] = "name"
    elif result.status is EntryStatus.SAVED:
        out["message"] = f"Thanks! Your name is in today’s draw. Check back after {close_at} to see who won."
    elif result.status is EntryStatus.FAILED:
        out["message"] = RETRY_LATER_TEXT
    elif result.status is EntryStatus.ALREADY_ENTERED:
        out["message"] = f"Your name is already in today’s draw. Check back after {close_at} to see who won."
    else:
        out["message"] = "Only a correct answer today can enter the draw."
    return out

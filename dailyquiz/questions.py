import json
from pathlib import Path
from typing import Sequence

from .schemas import Question

def load_questions(path: Path) -> list[Question]:
    """Read the static question collection, indexed by day."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return [Question.model_validate(q) for q in raw["questions"]]

def question_for_day(questions: Sequence[Question], day_index: int) -> Question:
    # days past the end of the collection repeat the last question
    if 0 <= day_index < len(questions):
        return questions[day_index]
    return questions[-1]

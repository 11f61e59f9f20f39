import random
from datetime import datetime, timezone
from typing import Optional, Sequence

from .schemas import Entry, Winner

def pick_winner_random(
    entries: Sequence[Entry],
    rng: random.Random | None = None,
    now: Optional[datetime] = None,
) -> Optional[Winner]:
    if not entries:
        return None
    chosen = (rng or random).choice(entries)
    return Winner(name=chosen.name, ts=now or datetime.now(timezone.utc))

from enum import Enum

from .utils_time import in_window

class WindowState(str, Enum):
    NOT_STARTED = "not_started"
    FINISHED = "finished"
    WINNER_ANNOUNCED = "winner_announced"
    WAITING = "waiting"
    WINDOW_JUST_CLOSED = "window_just_closed"
    OPEN = "open"

def in_range(day_index: int, total_days: int) -> bool:
    return 0 <= day_index < total_days

def classify_window(
    day_index: int,
    hour: int,
    total_days: int,
    open_hour: int,
    close_hour: int,
    has_winner: bool = False,
) -> WindowState:
    # order matters, first match wins
    if day_index < 0:
        return WindowState.NOT_STARTED
    if day_index >= total_days:
        return WindowState.FINISHED
    if has_winner:
        return WindowState.WINNER_ANNOUNCED
    if not in_window(hour, open_hour, close_hour):
        if hour < open_hour:
            return WindowState.WAITING
        return WindowState.WINDOW_JUST_CLOSED
    return WindowState.OPEN

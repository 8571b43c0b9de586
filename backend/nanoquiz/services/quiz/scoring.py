import math
from typing import Iterable, Optional

BASE_POINTS = 500
SPEED_POINTS = 500


def is_correct(selected_option_id: Optional[str], correct_option_ids: Iterable[str]) -> bool:
    return selected_option_id is not None and selected_option_id in set(correct_option_ids)


def compute_points(time_limit_ms: int, round_end_ms: int, answered_at_ms: Optional[int], correct: bool) -> int:
    """Points for one answer.

    A correct answer earns 500 plus up to 500 more in proportion to the time
    left on the clock when it arrived. Answers at or after the deadline earn
    500; wrong or missing answers earn 0.
    """
    if not correct or answered_at_ms is None or time_limit_ms <= 0:
        return 0
    time_remaining = max(0, round_end_ms - answered_at_ms)
    return int(math.floor(BASE_POINTS + SPEED_POINTS * time_remaining / time_limit_ms))

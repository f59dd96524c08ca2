"""Wall clock in whole epoch seconds, the unit stored in every time column."""

from datetime import datetime, timezone


def epoch_now() -> int:
    return int(datetime.now(timezone.utc).timestamp())

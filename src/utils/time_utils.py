import time


def get_current_timestamp_seconds() -> int:
    """Current unix time in whole seconds, the resolution signed orders carry."""
    return int(time.time())

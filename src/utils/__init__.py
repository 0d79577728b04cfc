from .time_utils import get_current_timestamp_seconds
from .task_utils import safe_cancel_task, TaskManager

# math_utils is imported directly: from utils.math_utils import to_fixed_point

__all__ = ["get_current_timestamp_seconds", "safe_cancel_task", "TaskManager"]

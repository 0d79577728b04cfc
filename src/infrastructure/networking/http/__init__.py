from .structs import HTTPMethod, RequestMetrics
from .rest_manager import RestManager, default_error_handler

__all__ = [
    "HTTPMethod",
    "RequestMetrics",
    "RestManager",
    "default_error_handler",
]

from enum import Enum

import msgspec


class HTTPMethod(Enum):
    """HTTP methods."""
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


class RequestMetrics(msgspec.Struct):
    """Request counters and latency for one RestManager."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rate_limit_hits: int = 0
    avg_latency_ms: float = 0.0
    last_latency_ms: float = 0.0

    def record(self, latency_ms: float, success: bool, rate_limited: bool = False) -> None:
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        if rate_limited:
            self.rate_limit_hits += 1
        self.last_latency_ms = latency_ms
        # Running average
        self.avg_latency_ms += (latency_ms - self.avg_latency_ms) / self.total_requests

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

REQUESTS = Counter("devrep_requests_total", "Total GitHub API requests", ["op"])
FAILURES = Counter("devrep_request_failures_total", "GitHub API requests that raised", ["op"])
LATENCY = Histogram("devrep_request_latency_seconds", "GitHub API request latency", ["op"])


@contextmanager
def record(op: str) -> Iterator[None]:
    start = time.time()
    try:
        yield
    except Exception:
        FAILURES.labels(op=op).inc()
        raise
    finally:
        REQUESTS.labels(op=op).inc()
        LATENCY.labels(op=op).observe(time.time() - start)

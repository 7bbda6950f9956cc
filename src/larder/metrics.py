"""Prometheus metrics definitions for Larder."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "larder_http_requests_total",
    "Total number of HTTP requests processed by the Larder API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "larder_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Larder API",
    ["method", "path"],
)

ITEM_EVENTS = Counter(
    "larder_item_events_total",
    "Pantry item lifecycle transitions",
    ["event"],
)

SCAN_JOBS = Counter(
    "larder_scan_jobs_total",
    "Receipt scan stages executed by outcome",
    ["stage", "status"],
)

LLM_REQUESTS = Counter(
    "larder_llm_requests_total",
    "Text generation calls by assistant operation and outcome",
    ["operation", "status"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "ITEM_EVENTS",
    "SCAN_JOBS",
    "LLM_REQUESTS",
]

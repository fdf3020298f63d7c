"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"reviewguard_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"reviewguard_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

REVIEW_SUBMISSIONS = Counter(
	"reviewguard_review_submissions_total",
	"Review submissions by outcome",
	["outcome"],
)

REVIEW_TRUST_FLAGS = Counter(
	"reviewguard_review_trust_flags_total",
	"Trust flags raised on review submissions",
	["flag"],
)

RATE_LIMIT_REJECTS = Counter(
	"reviewguard_rate_limit_rejects_total",
	"Submissions rejected by a rolling-window limiter",
	["surface"],
)

MODERATION_ACTIONS = Counter(
	"reviewguard_moderation_actions_total",
	"Human moderation decisions applied to reviews",
	["action"],
)

NOTIFY_FAILURES = Counter(
	"reviewguard_notify_failures_total",
	"Notifier deliveries that failed",
	["kind"],
)

CONTACT_REJECTS = Counter(
	"reviewguard_contact_rejects_total",
	"Contact messages rejected by the hard content gate",
	["reason"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_review_submission(outcome: str) -> None:
	REVIEW_SUBMISSIONS.labels(outcome=outcome).inc()


def inc_trust_flag(flag: str) -> None:
	REVIEW_TRUST_FLAGS.labels(flag=flag).inc()


def inc_rate_limit_reject(surface: str) -> None:
	RATE_LIMIT_REJECTS.labels(surface=surface).inc()


def inc_moderation_action(action: str) -> None:
	MODERATION_ACTIONS.labels(action=action).inc()


def inc_notify_failure(kind: str) -> None:
	NOTIFY_FAILURES.labels(kind=kind).inc()


def inc_contact_reject(reason: str) -> None:
	CONTACT_REJECTS.labels(reason=reason).inc()

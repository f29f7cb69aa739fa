"""Prometheus metrics for atelier."""

from prometheus_client import Counter, Histogram

TURNS = Counter(
    "atelier_turns_total",
    "Turns processed",
    labelnames=["intent", "outcome"],
)

TURN_LATENCY = Histogram(
    "atelier_turn_latency_seconds",
    "End-to-end turn latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0),
)

GENERATOR_LATENCY = Histogram(
    "atelier_generator_latency_seconds",
    "Advice generator latency in seconds",
    labelnames=["generator"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0),
)

MODEL_INVOCATIONS = Counter(
    "atelier_model_invocations_total",
    "Structured model invocations",
    labelnames=["model", "outcome"],
)

TOOL_CALLS = Counter(
    "atelier_tool_calls_total",
    "Retrieval tools invoked by the model",
    labelnames=["tool"],
)

SESSION_ROTATIONS = Counter(
    "atelier_session_rotations_total",
    "Stale conversations closed and replaced",
)

PROFILE_INFERENCES = Counter(
    "atelier_profile_inferences_total",
    "Profile inference attempts",
    labelnames=["outcome"],
)

WARDROBE_ITEMS_INDEXED = Counter(
    "atelier_wardrobe_items_indexed_total",
    "Wardrobe items recorded from outfit photos",
)

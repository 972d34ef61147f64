"""Monitoring configuration for the drill engine."""
from prometheus_client import Counter, start_http_server

# Drill metrics
answers_recorded = Counter(
    "lexdrill_answers_total",
    "Total number of answers recorded in the stats ledger",
    ["outcome"],
)

items_picked = Counter(
    "lexdrill_items_picked_total",
    "Total number of drill items drawn by the adaptive selector",
    ["mode"],
)

# Gating metrics
lesson_rejections = Counter(
    "lexdrill_lesson_rejections_total",
    "Total number of attempts to enter a locked lesson",
)

# Ledger metrics
ledger_resets = Counter(
    "lexdrill_ledger_resets_total",
    "Total number of full stats ledger resets",
)

ledger_saves = Counter(
    "lexdrill_ledger_saves_total",
    "Total number of ledger snapshots written to a store",
    ["backend"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)

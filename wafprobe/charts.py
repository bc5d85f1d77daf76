"""Per-category block rates used to draw the report radar charts."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Statistics, TestRecord

EMPTY_INDICATOR = "-"

# Slot layouts that spread a few indicators evenly around a radar chart.
_LAYOUTS: dict[int, tuple[int | None, ...]] = {
    1: (0, None, None, None, None, None),
    2: (None, 0, None, None, 1, None),
    3: (0, None, 1, None, 2, None),
    4: (None, 0, None, 1, None, 2, None, 3),
}


@dataclass
class BlockCounter:
    """Blocked and bypassed counts for one test type."""

    blocked: int = 0
    bypassed: int = 0


Counters = dict[str, dict[str, BlockCounter]]


def is_api_test(set_name: str) -> bool:
    """Tell whether a test set belongs to the API category."""
    return "api" in set_name


def _percentage(part: int, total: int) -> float:
    return 0.0 if total == 0 else part / total * 100


def update_counters(test: TestRecord, counters: Counters, is_blocked: bool) -> None:
    """Count one test under its category and lower-cased type."""
    category = "api" if is_api_test(test.test_set) else "app"
    typ = test.test_type.lower() if test.test_type else "unknown"

    counter = counters.setdefault(category, {}).setdefault(typ, BlockCounter())
    if is_blocked:
        counter.blocked += 1
    else:
        counter.bypassed += 1


def get_indicators_and_items(
    counters: Counters, category: str
) -> tuple[list[str], list[float]]:
    """Return chart labels and block percentages for one category."""
    indicators: list[str] = []
    items: list[float] = []
    for test_type, counter in counters.get(category, {}).items():
        percentage = _percentage(counter.blocked, counter.blocked + counter.bypassed)
        indicators.append(f"{test_type} ({percentage:.1f}%)")
        items.append(percentage)

    layout = _LAYOUTS.get(len(indicators))
    if layout is None:
        return indicators, items

    return (
        [EMPTY_INDICATOR if i is None else indicators[i] for i in layout],
        [0.0 if i is None else items[i] for i in layout],
    )


def generate_chart_data(
    stats: Statistics,
) -> tuple[list[str], list[float], list[str], list[float]]:
    """Return API indicators, API items, application indicators and items."""
    counters: Counters = {}
    for test in stats.negative_tests.blocked:
        update_counters(test, counters, True)
    for test in stats.negative_tests.bypasses:
        update_counters(test, counters, False)

    mark_grpc = not stats.is_grpc_available and "api" in counters
    if mark_grpc:
        # gRPC belongs to API security; show it even when it was not reachable.
        counters["api"]["grpc"] = BlockCounter()

    api_indicators, api_items = get_indicators_and_items(counters, "api")
    app_indicators, app_items = get_indicators_and_items(counters, "app")

    if mark_grpc:
        for i, label in enumerate(api_indicators):
            if label.startswith("grpc"):
                api_indicators[i] = "grpc (unavailable)"
                api_items[i] = 0.0

    return api_indicators, api_items, app_indicators, app_items
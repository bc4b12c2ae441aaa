"""Soft validation: settings that are legal but probably a mistake."""

import warnings
from typing import List

from .defaults import DEFAULT_STOP_WORDS
from .models import AppConfig


def check_for_warnings(app_config: AppConfig) -> List[str]:
    """Return warning messages for a validated configuration.

    Args:
        app_config: Configuration that already passed schema validation

    Returns:
        List of warning messages (empty if nothing looks suspicious)
    """
    matching = app_config.matching
    warning_messages = []

    if matching.threshold > matching.max_attainable_score:
        warning_messages.append(
            f"Match threshold {matching.threshold} is above the highest attainable score "
            f"({matching.max_attainable_score:g}); no item will ever be matched"
        )

    for signal in ("category", "location", "keywords"):
        if getattr(matching.weights, signal) == 0:
            warning_messages.append(f"Weight for '{signal}' is 0; that signal is ignored")

    if matching.threshold == 0:
        warning_messages.append(
            "Match threshold is 0; every open item of the opposite type is a candidate"
        )

    redundant = sorted(set(matching.extra_stop_words) & DEFAULT_STOP_WORDS)
    if redundant:
        warning_messages.append(
            f"extra_stop_words already in the built-in list: {', '.join(redundant)}"
        )

    if app_config.items.ttl_seconds and app_config.sweep_interval_seconds:
        if app_config.sweep_interval_seconds >= app_config.items.ttl_seconds:
            warning_messages.append(
                "sweep_interval is not shorter than the item TTL; missed items may expire "
                "before the sweep picks them up"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)

"""
Filter composition package.

WHY: Shared by every list endpoint that accepts `filters=<json array>`.
"""

from backoffice.filters.builder import (
    FilterExpression,
    FilterExpressionBuilder,
    parse_filters_param,
)
from backoffice.filters.presets import (
    Bounds,
    Preset,
    ExpiryWindowPreset,
    AgeBandPreset,
    CalendarWindowPreset,
    expiry_window,
    age_band,
    calendar_window,
)

__all__ = [
    "FilterExpression",
    "FilterExpressionBuilder",
    "parse_filters_param",
    "Bounds",
    "Preset",
    "ExpiryWindowPreset",
    "AgeBandPreset",
    "CalendarWindowPreset",
    "expiry_window",
    "age_band",
    "calendar_window",
]

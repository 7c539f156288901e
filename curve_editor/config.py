from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Mapping, Optional

from .interpolation import InterpolationMethod

ValueChangedCallback = Callable[[int, float], None]

# ---------------------------------------------------------------------------
# Drawing and interaction constants (logical pixels)
# ---------------------------------------------------------------------------

PADDING: float = 20.0
POINT_RADIUS: float = 3.0
DRAG_RADIUS_FACTOR: float = 1.25
HIT_TOLERANCE: float = 2.0
STROKE_TOLERANCE: float = 4.0
CURVE_SAMPLES_PER_POINT: int = 10
PAN_TOLERANCE_SPACINGS: float = 4.0
GRID_MIN_SPACING: float = 20.0

DEFAULT_INDEX_SPACING: float = 20.0
DEFAULT_RATIO: float = 5.0
MIN_RATIO: float = 1e-6
MAX_DECIMAL_PLACES: int = 6


def _ignore_value_change(index: int, value: float) -> None:
    return None


# ===========================================================================
# Value constraints
# ===========================================================================

@dataclass(frozen=True, slots=True)
class ValueConstraints:
    min_val: Optional[float] = None
    max_val: Optional[float] = None
    decimal_places: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.decimal_places <= MAX_DECIMAL_PLACES):
            raise ValueError(
                f"decimal_places must be in [0, {MAX_DECIMAL_PLACES}], got {self.decimal_places}"
            )
        if (self.min_val is not None and self.max_val is not None
                and self.min_val > self.max_val):
            raise ValueError(f"min_val ({self.min_val}) must be <= max_val ({self.max_val})")

    def limit(self, value: float) -> float:
        """Clamp to [min_val, max_val], then round half up to decimal_places."""
        if self.min_val is not None and value < self.min_val:
            value = self.min_val
        if self.max_val is not None and value > self.max_val:
            value = self.max_val
        factor = 10.0 ** self.decimal_places
        return math.floor(value * factor + 0.5) / factor


# ===========================================================================
# Editor configuration
# ===========================================================================

@dataclass(frozen=True, slots=True)
class EditorConfig:
    min_val: Optional[float] = None
    max_val: Optional[float] = None
    decimal_places: int = 0
    ratio: float = DEFAULT_RATIO
    interpolation_method: InterpolationMethod = InterpolationMethod.CUBIC_SPLINE
    index_spacing: float = DEFAULT_INDEX_SPACING
    on_value_changed: ValueChangedCallback = field(default=_ignore_value_change, compare=False)

    def __post_init__(self) -> None:
        if self.ratio <= 0:
            raise ValueError(f"ratio must be positive, got {self.ratio}")
        if self.index_spacing <= 0:
            raise ValueError(f"index_spacing must be positive, got {self.index_spacing}")
        if not isinstance(self.interpolation_method, InterpolationMethod):
            raise ValueError(f"unknown interpolation method: {self.interpolation_method!r}")
        if not callable(self.on_value_changed):
            raise ValueError("on_value_changed must be callable")
        ValueConstraints(self.min_val, self.max_val, self.decimal_places)

    @property
    def constraints(self) -> ValueConstraints:
        return ValueConstraints(self.min_val, self.max_val, self.decimal_places)

    def updated(self, params: Mapping[str, Any]) -> EditorConfig:
        """Return a copy with ``params`` normalized and applied."""
        return replace(self, **normalize_params(params, self))


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def normalize_params(params: Mapping[str, Any], current: EditorConfig) -> dict[str, Any]:
    """Coerce host-supplied option values before they reach the core.

    Unknown keys raise ``ValueError``.  Non-numeric bounds become ``None``
    (unbounded), decimal places are clamped to 0..6, a non-positive ratio is
    raised to ``MIN_RATIO`` and method names are converted to the enum.
    Inverted bounds are swapped.
    """
    known = {f.name for f in fields(EditorConfig)}
    unknown = set(params) - known
    if unknown:
        raise ValueError(f"unknown configuration option(s): {', '.join(sorted(unknown))}")

    out: dict[str, Any] = dict(params)
    if "min_val" in out:
        out["min_val"] = _optional_float(out["min_val"])
    if "max_val" in out:
        out["max_val"] = _optional_float(out["max_val"])
    if "decimal_places" in out:
        try:
            places = int(round(float(out["decimal_places"])))
        except (TypeError, ValueError):
            places = current.decimal_places
        out["decimal_places"] = max(0, min(MAX_DECIMAL_PLACES, places))
    if "ratio" in out:
        ratio = _optional_float(out["ratio"])
        out["ratio"] = current.ratio if ratio is None else max(MIN_RATIO, ratio)
    if "index_spacing" in out:
        spacing = _optional_float(out["index_spacing"])
        out["index_spacing"] = (current.index_spacing if spacing is None or spacing <= 0
                                else spacing)
    if "interpolation_method" in out:
        out["interpolation_method"] = InterpolationMethod(out["interpolation_method"])

    lo = out.get("min_val", current.min_val)
    hi = out.get("max_val", current.max_val)
    if lo is not None and hi is not None and lo > hi:
        out["min_val"], out["max_val"] = hi, lo
    return out

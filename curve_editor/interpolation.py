"""
Interpolation through a sparse set of control points.

Five methods
------------
1.  linear          piecewise linear, clamped outside the knots
2.  cubicSpline     natural cubic spline (M0 = Mn = 0), Thomas solve
3.  catmullRom      uniform Catmull-Rom, tension 0.5
4.  pchip           monotone cubic Hermite (Fritsch-Butland derivatives)
5.  polynomial      global Lagrange polynomial through every knot

Every function takes ``points`` as a sequence of ``(x, y)`` pairs sorted by
``x`` and a query abscissa, and returns a float.  The cubic methods evaluate
the boundary segment's polynomial outside the knot range.

Each method is an ``Interpolator`` class that prepares its coefficients once;
``sample`` and the fitting commit evaluate many abscissae against one instance.
"""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating[Any]]
ControlPoints = Sequence[tuple[float, float]]


class InterpolationMethod(str, Enum):
    LINEAR = "linear"
    CUBIC_SPLINE = "cubicSpline"
    CATMULL_ROM = "catmullRom"
    PCHIP = "pchip"
    POLYNOMIAL = "polynomial"


# ===========================================================================
# Errors
# ===========================================================================

class InterpolationError(ValueError):
    pass


class EmptyInputError(InterpolationError):
    def __init__(self) -> None:
        super().__init__("No control points provided")


class InsufficientPointsError(InterpolationError):
    def __init__(self, method: InterpolationMethod, n: int) -> None:
        super().__init__(f"{method.value} requires at least 2 control points, got {n}")
        self.method = method
        self.n = n


class DuplicateAbscissaError(InterpolationError):
    def __init__(self, x: float) -> None:
        super().__init__(f"Duplicate x value {x!r} not allowed in polynomial interpolation")
        self.x = x


# ===========================================================================
# Helpers
# ===========================================================================

def _split(points: ControlPoints) -> tuple[list[float], list[float]]:
    return [float(p[0]) for p in points], [float(p[1]) for p in points]


def _segment(xs: Sequence[float], x: float) -> int:
    """Index i of the segment [xs[i], xs[i+1]] holding x, clamped to the ends."""
    n = len(xs)
    if x <= xs[0]:
        return 0
    if x >= xs[n - 1]:
        return n - 2
    # first i with x <= xs[i + 1]
    return bisect.bisect_left(xs, x, 1, n - 1) - 1


def _two_point_linear(xs: Sequence[float], ys: Sequence[float], x: float) -> float:
    if x <= xs[0]:
        return ys[0]
    if x >= xs[1]:
        return ys[1]
    t = (x - xs[0]) / (xs[1] - xs[0])
    return ys[0] + t * (ys[1] - ys[0])


# ===========================================================================
# Interpolators
# ===========================================================================

class Interpolator(ABC):
    """Curve through fixed control points, evaluated at many abscissae.

    Coefficients are computed once in ``__init__``; each call only searches
    the segment and evaluates its polynomial.
    """

    method: InterpolationMethod

    def __init__(self, points: ControlPoints) -> None:
        if len(points) == 0:
            raise EmptyInputError()
        self.xs, self.ys = _split(points)

    @abstractmethod
    def __call__(self, x: float) -> float:
        raise NotImplementedError

    def _require_two(self) -> None:
        if len(self.xs) < 2:
            raise InsufficientPointsError(self.method, len(self.xs))


class LinearInterpolator(Interpolator):
    method = InterpolationMethod.LINEAR

    def __call__(self, x: float) -> float:
        xs, ys = self.xs, self.ys
        if len(xs) == 1 or x <= xs[0]:
            return ys[0]
        if x >= xs[-1]:
            return ys[-1]
        i = _segment(xs, x)
        t = (x - xs[i]) / (xs[i + 1] - xs[i])
        return ys[i] + t * (ys[i + 1] - ys[i])


def _natural_second_derivatives(xs: Sequence[float], ys: Sequence[float]) -> list[float]:
    """Solve the tridiagonal system for M1..M(n-2); M0 = M(n-1) = 0."""
    n = len(xs)
    m = [0.0] * n
    if n < 3:
        return m
    h = [xs[j + 1] - xs[j] for j in range(n - 1)]
    size = n - 2
    sub = [h[j] for j in range(size)]
    diag = [2.0 * (h[j] + h[j + 1]) for j in range(size)]
    sup = [h[j + 1] for j in range(size)]
    rhs = [
        6.0 * ((ys[j + 2] - ys[j + 1]) / h[j + 1] - (ys[j + 1] - ys[j]) / h[j])
        for j in range(size)
    ]
    # forward elimination
    for j in range(1, size):
        w = sub[j] / diag[j - 1]
        diag[j] -= w * sup[j - 1]
        rhs[j] -= w * rhs[j - 1]
    # back substitution
    m[size] = rhs[size - 1] / diag[size - 1]
    for j in range(size - 2, -1, -1):
        m[j + 1] = (rhs[j] - sup[j] * m[j + 2]) / diag[j]
    return m


class CubicSplineInterpolator(Interpolator):
    method = InterpolationMethod.CUBIC_SPLINE

    def __init__(self, points: ControlPoints) -> None:
        super().__init__(points)
        self._require_two()
        self.m = _natural_second_derivatives(self.xs, self.ys)

    def __call__(self, x: float) -> float:
        xs, ys = self.xs, self.ys
        if len(xs) == 2:
            return _two_point_linear(xs, ys, x)
        i = _segment(xs, x)
        hi = xs[i + 1] - xs[i]
        dx = x - xs[i]
        mi, mi1 = self.m[i], self.m[i + 1]
        return (
            (mi1 - mi) / (6.0 * hi) * dx ** 3
            + mi / 2.0 * dx ** 2
            + ((ys[i + 1] - ys[i]) / hi - hi * (mi1 + 2.0 * mi) / 6.0) * dx
            + ys[i]
        )


class CatmullRomInterpolator(Interpolator):
    method = InterpolationMethod.CATMULL_ROM

    def __init__(self, points: ControlPoints) -> None:
        super().__init__(points)
        self._require_two()

    def __call__(self, x: float) -> float:
        xs, ys = self.xs, self.ys
        n = len(xs)
        if n == 2:
            return _two_point_linear(xs, ys, x)
        i = _segment(xs, x)
        p0 = ys[max(0, i - 1)]
        p1 = ys[i]
        p2 = ys[i + 1]
        p3 = ys[min(n - 1, i + 2)]
        t = (x - xs[i]) / (xs[i + 1] - xs[i])
        t2 = t * t
        t3 = t2 * t
        return 0.5 * (
            (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * t3
            + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t2
            + (-p0 + p2) * t
            + 2.0 * p1
        )


def _pchip_endpoint(slope: float, neighbour: float) -> float:
    if slope * neighbour <= 0:
        return 0.0
    if abs(neighbour) < abs(slope):
        return 2.0 * slope - neighbour
    return slope


def pchip_derivatives(xs: Sequence[float], ys: Sequence[float]) -> list[float]:
    """Knot derivatives that keep each segment monotone between its knots."""
    n = len(xs)
    h = [xs[i + 1] - xs[i] for i in range(n - 1)]
    s = [(ys[i + 1] - ys[i]) / h[i] for i in range(n - 1)]
    d = [0.0] * n
    for i in range(1, n - 1):
        s0, s1 = s[i - 1], s[i]
        if s0 * s1 <= 0:
            continue
        w1 = 2.0 * h[i] + h[i - 1]
        w2 = h[i] + 2.0 * h[i - 1]
        d[i] = (w1 + w2) / (w1 / s0 + w2 / s1)
    d[0] = _pchip_endpoint(s[0], d[1])
    d[n - 1] = _pchip_endpoint(s[n - 2], d[n - 2])
    return d


class PchipInterpolator(Interpolator):
    method = InterpolationMethod.PCHIP

    def __init__(self, points: ControlPoints) -> None:
        super().__init__(points)
        self._require_two()
        self.d = pchip_derivatives(self.xs, self.ys) if len(self.xs) > 2 else []

    def __call__(self, x: float) -> float:
        xs, ys, d = self.xs, self.ys, self.d
        if len(xs) == 2:
            return _two_point_linear(xs, ys, x)
        i = _segment(xs, x)
        dx = xs[i + 1] - xs[i]
        t = (x - xs[i]) / dx
        h00 = (1.0 + 2.0 * t) * (1.0 - t) ** 2
        h10 = t * (1.0 - t) ** 2
        h01 = t * t * (3.0 - 2.0 * t)
        h11 = t * t * (t - 1.0)
        return h00 * ys[i] + h10 * dx * d[i] + h01 * ys[i + 1] + h11 * dx * d[i + 1]


class PolynomialInterpolator(Interpolator):
    """Global Lagrange polynomial, evaluated in its modified (weighted) form."""

    method = InterpolationMethod.POLYNOMIAL

    def __init__(self, points: ControlPoints) -> None:
        super().__init__(points)
        xs = self.xs
        self.weights: list[float] = []
        for i, xi in enumerate(xs):
            w = 1.0
            for j, xj in enumerate(xs):
                if i == j:
                    continue
                if xi == xj:
                    raise DuplicateAbscissaError(xi)
                w /= xi - xj
            self.weights.append(w)

    def __call__(self, x: float) -> float:
        xs, ys = self.xs, self.ys
        if len(xs) == 1:
            return ys[0]
        ell = 1.0
        total = 0.0
        for xi, yi, wi in zip(xs, ys, self.weights):
            if x == xi:
                return yi
            ell *= x - xi
            total += wi * yi / (x - xi)
        return ell * total


# ===========================================================================
# Per-method functions
# ===========================================================================

def linear(points: ControlPoints, x: float) -> float:
    return LinearInterpolator(points)(x)


def cubic_spline(points: ControlPoints, x: float) -> float:
    return CubicSplineInterpolator(points)(x)


def catmull_rom(points: ControlPoints, x: float) -> float:
    return CatmullRomInterpolator(points)(x)


def pchip(points: ControlPoints, x: float) -> float:
    return PchipInterpolator(points)(x)


def polynomial(points: ControlPoints, x: float) -> float:
    return PolynomialInterpolator(points)(x)


# ===========================================================================
# Dispatch
# ===========================================================================

def interpolator(method: InterpolationMethod, points: ControlPoints) -> Interpolator:
    match method:
        case InterpolationMethod.LINEAR:
            return LinearInterpolator(points)
        case InterpolationMethod.CUBIC_SPLINE:
            return CubicSplineInterpolator(points)
        case InterpolationMethod.CATMULL_ROM:
            return CatmullRomInterpolator(points)
        case InterpolationMethod.PCHIP:
            return PchipInterpolator(points)
        case InterpolationMethod.POLYNOMIAL:
            return PolynomialInterpolator(points)
    raise ValueError(f"Unsupported interpolation method: {method!r}")


def evaluate(method: InterpolationMethod, points: ControlPoints, x: float) -> float:
    return interpolator(method, points)(x)


def sample(
    method: InterpolationMethod, points: ControlPoints, count: int
) -> tuple[FloatArray, FloatArray]:
    """Evaluate ``count + 1`` evenly spaced abscissae spanning the knots."""
    fn = interpolator(method, points)
    xs = np.linspace(fn.xs[0], fn.xs[-1], max(1, count) + 1, dtype=np.float64)
    ys = np.fromiter((fn(float(x)) for x in xs), dtype=np.float64, count=len(xs))
    return xs, ys

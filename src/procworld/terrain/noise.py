"""Noise generation functions for terrain synthesis.

Provides seeded gradient noise (Perlin 1D/2D/3D and simplex), ridge and
cellular (Worley) transforms, and fractal Brownian motion.

Every function is a pure function of its coordinates and seed, so the same
seed always reproduces the same world. Coordinates may be scalars or numpy
arrays of any broadcastable shape; scalar input returns a Python float.
A seed of ``None`` yields zeros rather than raising.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Hash multipliers for lattice coordinates
_HASH_X = 374761393
_HASH_Y = 668265263
_HASH_Z = 374761393
_HASH_MIX = 1274126177

# Simplex skew/unskew factors
_F2 = 0.366025404  # 0.5 * (sqrt(3) - 1)
_G2 = 0.211324865  # (3 - sqrt(3)) / 6
_SIMPLEX_SCALE = 70.0

_GRADIENTS_2D = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)


def _build_gradients_3d() -> NDArray[np.float64]:
    """Build the 16-entry normalized 3D gradient table."""
    gradients = np.zeros((16, 3), dtype=np.float64)
    for h in range(16):
        u = -1.0 if h & 8 else 1.0
        v = -1.0 if h & 4 else 1.0
        dx = u if h & 1 else 0.0
        dy = v if h & 2 else 0.0
        # Both planar components empty only when h & 3 == 0
        dz = u if dx == 0.0 and dy == 0.0 else 0.0
        vector = np.array([dx, dy, dz])
        gradients[h] = vector / np.linalg.norm(vector)
    return gradients


_GRADIENTS_3D = _build_gradients_3d()


def _prepare(*coords: ArrayLike) -> tuple[list[NDArray[np.float64]], bool]:
    """Broadcast coordinates to float64 arrays of at least one dimension.

    Returns:
        Tuple of (broadcast arrays, whether every input was a scalar).
    """
    scalar = all(np.ndim(c) == 0 for c in coords)
    arrays = np.broadcast_arrays(
        *(np.atleast_1d(np.asarray(c, dtype=np.float64)) for c in coords)
    )
    return list(arrays), scalar


def _finish(result: NDArray[np.float64], scalar: bool) -> Any:
    """Unwrap single-value results computed from scalar input."""
    if scalar:
        return float(result.reshape(-1)[0])
    return result


def _hash(x: Any, y: Any, z: Any, seed: int) -> NDArray[np.int64]:
    """Combine lattice coordinates and seed into a pseudo-random integer.

    Uses multiply-xor-shift mixing with 64-bit two's-complement wraparound.
    """
    h = np.asarray(x, dtype=np.int64) * _HASH_X
    h = h + np.asarray(y, dtype=np.int64) * _HASH_Y
    h = h + np.asarray(z, dtype=np.int64) * _HASH_Z
    h = h + np.int64(seed)
    h = (h ^ (h >> 13)) * _HASH_MIX
    return h ^ (h >> 16)


def _hash_to_float(h: NDArray[np.int64]) -> NDArray[np.float64]:
    """Map a hash to a float in [0, 1)."""
    return (h & 0xFFFFFF).astype(np.float64) / 16777216.0


def fade(t: ArrayLike) -> Any:
    """Quintic interpolation curve 6t^5 - 15t^4 + 10t^3."""
    t = np.asarray(t, dtype=np.float64)
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: Any, b: Any, t: Any) -> Any:
    """Linear interpolation between a and b."""
    return a + t * (b - a)


def perlin_1d(x: ArrayLike, seed: int | None) -> Any:
    """1D gradient noise, roughly in [-1, 1].

    Args:
        x: Sample coordinate(s).
        seed: Noise seed.

    Returns:
        Noise value(s) with the shape of ``x``.
    """
    (xs,), scalar = _prepare(x)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    x0 = np.floor(xs)
    ix0 = x0.astype(np.int64)
    fx = xs - x0

    g0 = np.where((_hash(ix0, 0, 0, seed) & 1) == 0, 1.0, -1.0)
    g1 = np.where((_hash(ix0 + 1, 0, 0, seed) & 1) == 0, 1.0, -1.0)

    result = lerp(g0 * fx, g1 * (fx - 1.0), fade(fx)) * 2.0
    return _finish(result, scalar)


def _gradient_dot_2d(
    ix: NDArray[np.int64],
    iy: NDArray[np.int64],
    dx: NDArray[np.float64],
    dy: NDArray[np.float64],
    seed: int,
) -> NDArray[np.float64]:
    gradient = _GRADIENTS_2D[_hash(ix, iy, 0, seed) & 7]
    return gradient[..., 0] * dx + gradient[..., 1] * dy


def perlin_2d(x: ArrayLike, y: ArrayLike, seed: int | None) -> Any:
    """2D gradient noise, roughly in [-1, 1].

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        seed: Noise seed.

    Returns:
        Noise value(s) with the broadcast shape of ``x`` and ``y``.
    """
    (xs, ys), scalar = _prepare(x, y)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    x0 = np.floor(xs)
    y0 = np.floor(ys)
    ix0 = x0.astype(np.int64)
    iy0 = y0.astype(np.int64)
    fx = xs - x0
    fy = ys - y0
    sx = fade(fx)
    sy = fade(fy)

    dp00 = _gradient_dot_2d(ix0, iy0, fx, fy, seed)
    dp10 = _gradient_dot_2d(ix0 + 1, iy0, fx - 1.0, fy, seed)
    dp01 = _gradient_dot_2d(ix0, iy0 + 1, fx, fy - 1.0, seed)
    dp11 = _gradient_dot_2d(ix0 + 1, iy0 + 1, fx - 1.0, fy - 1.0, seed)

    result = lerp(lerp(dp00, dp10, sx), lerp(dp01, dp11, sx), sy)
    return _finish(result, scalar)


def perlin_3d(x: ArrayLike, y: ArrayLike, z: ArrayLike, seed: int | None) -> Any:
    """3D gradient noise, roughly in [-1, 1].

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        z: Z coordinate(s).
        seed: Noise seed.

    Returns:
        Noise value(s) with the broadcast shape of the coordinates.
    """
    (xs, ys, zs), scalar = _prepare(x, y, z)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    x0 = np.floor(xs)
    y0 = np.floor(ys)
    z0 = np.floor(zs)
    ix0 = x0.astype(np.int64)
    iy0 = y0.astype(np.int64)
    iz0 = z0.astype(np.int64)
    fx = xs - x0
    fy = ys - y0
    fz = zs - z0

    def corner(cx: int, cy: int, cz: int) -> NDArray[np.float64]:
        gradient = _GRADIENTS_3D[_hash(ix0 + cx, iy0 + cy, iz0 + cz, seed) & 15]
        return (
            gradient[..., 0] * (fx - cx)
            + gradient[..., 1] * (fy - cy)
            + gradient[..., 2] * (fz - cz)
        )

    sx = fade(fx)
    sy = fade(fy)
    sz = fade(fz)

    v00 = lerp(corner(0, 0, 0), corner(1, 0, 0), sx)
    v10 = lerp(corner(0, 1, 0), corner(1, 1, 0), sx)
    v01 = lerp(corner(0, 0, 1), corner(1, 0, 1), sx)
    v11 = lerp(corner(0, 1, 1), corner(1, 1, 1), sx)

    result = lerp(lerp(v00, v10, sy), lerp(v01, v11, sy), sz)
    return _finish(result, scalar)


def _simplex_corner(
    ix: NDArray[np.int64],
    iy: NDArray[np.int64],
    dx: NDArray[np.float64],
    dy: NDArray[np.float64],
    seed: int,
) -> NDArray[np.float64]:
    t = 0.5 - dx * dx - dy * dy
    contribution = (t * t) * (t * t) * _gradient_dot_2d(ix, iy, dx, dy, seed)
    return np.where(t > 0.0, contribution, 0.0)


def simplex_2d(x: ArrayLike, y: ArrayLike, seed: int | None) -> Any:
    """2D simplex noise, roughly in [-1, 1].

    Smoother gradient variant of Perlin noise sampled on a skewed
    triangular lattice.
    """
    (xs, ys), scalar = _prepare(x, y)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    s = (xs + ys) * _F2
    i = np.floor(xs + s)
    j = np.floor(ys + s)
    t = (i + j) * _G2
    x0 = xs - (i - t)
    y0 = ys - (j - t)

    # Lower or upper triangle of the skewed cell
    i1 = (x0 > y0).astype(np.int64)
    j1 = 1 - i1

    x1 = x0 - i1 + _G2
    y1 = y0 - j1 + _G2
    x2 = x0 - 1.0 + 2.0 * _G2
    y2 = y0 - 1.0 + 2.0 * _G2

    ii = i.astype(np.int64)
    jj = j.astype(np.int64)

    n0 = _simplex_corner(ii, jj, x0, y0, seed)
    n1 = _simplex_corner(ii + i1, jj + j1, x1, y1, seed)
    n2 = _simplex_corner(ii + 1, jj + 1, x2, y2, seed)

    return _finish(_SIMPLEX_SCALE * (n0 + n1 + n2), scalar)


def ridge_2d(x: ArrayLike, y: ArrayLike, seed: int | None, power: float = 2.0) -> Any:
    """Ridge noise: ``(1 - |perlin|) ** power``, in [0, 1].

    Sharp maxima form where the underlying Perlin noise crosses zero,
    which reads as ridgelines on mountainous terrain.
    """
    (xs, ys), scalar = _prepare(x, y)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    n = 1.0 - np.abs(perlin_2d(xs, ys, seed))
    return _finish(np.clip(n, 0.0, 1.0) ** power, scalar)


def cellular_2d(x: ArrayLike, y: ArrayLike, seed: int | None) -> Any:
    """Cellular (Worley) noise.

    Returns the Euclidean distance to the nearest feature point, where each
    unit cell holds one hashed feature point. Distances are capped at 1.0.
    """
    (xs, ys), scalar = _prepare(x, y)
    if seed is None:
        return _finish(np.zeros_like(xs), scalar)

    ix = np.floor(xs).astype(np.int64)
    iy = np.floor(ys).astype(np.int64)
    min_dist = np.ones_like(xs)

    for nx in (-1, 0, 1):
        for ny in (-1, 0, 1):
            cx = ix + nx
            cy = iy + ny
            px = cx + _hash_to_float(_hash(cx, cy, 0, seed))
            py = cy + _hash_to_float(_hash(cx, cy, 1, seed))
            dx = px - xs
            dy = py - ys
            min_dist = np.minimum(min_dist, np.sqrt(dx * dx + dy * dy))

    return _finish(min_dist, scalar)


def fbm_2d(
    x: ArrayLike,
    y: ArrayLike,
    octaves: int,
    lacunarity: float = 2.0,
    gain: float = 0.5,
    seed: int | None = 0,
) -> Any:
    """Fractal Brownian motion over 2D Perlin noise.

    Sums octaves at increasing frequency and decreasing amplitude, then
    normalizes by the total amplitude so output stays roughly in [-1, 1].
    Octave ``i`` uses seed ``seed + i``.

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        octaves: Number of noise layers to sum.
        lacunarity: Frequency multiplier between octaves.
        gain: Amplitude multiplier between octaves.
        seed: Base noise seed.

    Returns:
        Noise value(s) with the broadcast shape of ``x`` and ``y``.
    """
    (xs, ys), scalar = _prepare(x, y)
    result = np.zeros_like(xs)
    if seed is None or octaves <= 0:
        return _finish(result, scalar)

    amplitude = 1.0
    frequency = 1.0
    max_amplitude = 0.0

    for i in range(octaves):
        result += perlin_2d(xs * frequency, ys * frequency, seed + i) * amplitude
        max_amplitude += amplitude
        amplitude *= gain
        frequency *= lacunarity

    if max_amplitude > 0:
        result /= max_amplitude
    return _finish(result, scalar)

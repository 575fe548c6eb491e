# galaxy.py
"""
Galaxy parameters and the point-cloud generator.

This module defines the GalaxyParameters record that the parameter panel
edits, the PointSet that holds one generation of star positions and colors
in float32 NumPy arrays, and generate_galaxy(), which maps the former to
the latter.
"""
import logging
import time
from dataclasses import dataclass, fields
from typing import Dict, Any, Mapping, Tuple

import numpy as np
from numba import jit

from constants import (
    ADDITIVE_BLENDING, DEFAULT_GALAXY_PARAMETERS, DEPTH_WRITE,
    MIN_GALAXY_RADIUS, SIZE_ATTENUATION, VERTEX_COLORS
)
from utils import hex_to_rgb

# --- Data Contracts ---
#
# class GalaxyParameters:
#   - Fields: count (int >= 1), size (float > 0), radius (float, clamped to
#     >= MIN_GALAXY_RADIUS), branches (int >= 1), spin (float),
#     randomness (float >= 0), inside_color / outside_color ("#rrggbb"),
#     rotate (float, radians per second about the vertical axis).
#   - update(key, value) is the only write path used by the UI. It coerces
#     and validates, raising ValueError on invalid input.
#
# generate_galaxy(params: GalaxyParameters, rng) -> PointSet:
#   - Inputs:
#     - params: read only.
#     - rng: any object with random(size) -> ndarray of floats in [0, 1),
#       e.g. numpy.random.Generator.
#   - Outputs: a PointSet with params.count points.
#   - Invariants:
#     - positions and colors have shape (count, 3) and dtype float32.
#     - Point i belongs to branch sector (i % branches).
#     - Every color channel lies in [0, 1].


@dataclass
class GalaxyParameters:
    """Generation inputs, edited by the parameter panel."""
    count: int = DEFAULT_GALAXY_PARAMETERS['count']
    size: float = DEFAULT_GALAXY_PARAMETERS['size']
    radius: float = DEFAULT_GALAXY_PARAMETERS['radius']
    branches: int = DEFAULT_GALAXY_PARAMETERS['branches']
    spin: float = DEFAULT_GALAXY_PARAMETERS['spin']
    randomness: float = DEFAULT_GALAXY_PARAMETERS['randomness']
    inside_color: str = DEFAULT_GALAXY_PARAMETERS['inside_color']
    outside_color: str = DEFAULT_GALAXY_PARAMETERS['outside_color']
    rotate: float = DEFAULT_GALAXY_PARAMETERS['rotate']

    def __post_init__(self):
        for name in self.field_names():
            setattr(self, name, self._validated(name, getattr(self, name)))

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "GalaxyParameters":
        """
        Builds parameters from the 'galaxy_parameters' config section.

        Unknown keys (such as 'seed') are ignored; missing keys take their
        defaults.
        """
        known = {k: v for k, v in params.items() if k in cls.field_names()}
        return cls(**known)

    def update(self, key: str, value: Any) -> None:
        """Sets one field after coercion and validation."""
        if key not in self.field_names():
            raise KeyError(f"Unknown galaxy parameter: {key}")
        old_value = getattr(self, key)
        new_value = self._validated(key, value)
        setattr(self, key, new_value)
        if new_value != old_value:
            logging.debug(f"Parameter '{key}' changed: {old_value} -> {new_value}")

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}

    def _validated(self, key: str, value: Any) -> Any:
        if key in ('count', 'branches'):
            value = int(round(value))
            if value < 1:
                self._reject(f"'{key}' must be at least 1, got {value}.")
            return value
        if key in ('inside_color', 'outside_color'):
            try:
                hex_to_rgb(value)
            except ValueError as e:
                self._reject(str(e))
            value = value.strip().lower()
            return value if value.startswith('#') else f"#{value}"
        value = float(value)
        if key == 'radius' and value < MIN_GALAXY_RADIUS:
            logging.warning(
                f"Galaxy radius {value} is below the minimum; "
                f"clamping to {MIN_GALAXY_RADIUS}."
            )
            return MIN_GALAXY_RADIUS
        if key == 'size' and value <= 0:
            self._reject(f"'size' must be positive, got {value}.")
        if key == 'randomness' and value < 0:
            self._reject(f"'randomness' must not be negative, got {value}.")
        return value

    @staticmethod
    def _reject(msg: str) -> None:
        msg = f"Parameter error: {msg}"
        logging.critical(msg)
        raise ValueError(msg)


class PointSet:
    """
    One generation of the galaxy: index-aligned positions and colors plus
    the material settings used to draw them.
    """
    def __init__(self, positions: np.ndarray, colors: np.ndarray, size: float):
        if positions.shape != colors.shape:
            raise ValueError(
                f"positions {positions.shape} and colors {colors.shape} "
                "must have the same shape."
            )
        self.positions = positions
        self.colors = colors
        self.size = size
        self.size_attenuation = SIZE_ATTENUATION
        self.additive_blending = ADDITIVE_BLENDING
        self.depth_write = DEPTH_WRITE
        self.vertex_colors = VERTEX_COLORS
        self.released = False

    @property
    def count(self) -> int:
        return self.positions.shape[0]

    def release(self) -> None:
        """Drops the backing buffers. The set is empty afterwards."""
        if self.released:
            return
        freed = self.positions.nbytes + self.colors.nbytes
        self.positions = np.empty((0, 3), dtype=np.float32)
        self.colors = np.empty((0, 3), dtype=np.float32)
        self.released = True
        logging.debug(f"Released point set buffers ({freed} bytes).")


@jit(nopython=True)
def mix_color(inside, outside, fraction, out):
    """
    Linear interpolation between two RGB colors, written into `out`.
    fraction 0 gives `inside` exactly; 1 gives `outside`.
    """
    for c in range(3):
        out[c] = inside[c] + (outside[c] - inside[c]) * fraction


@jit(nopython=True)
def _fill_galaxy_numba(radii, jitter, branches, spin, max_radius, inside, outside, positions, colors):
    """
    Numba-jitted per-star loop. Writes positions and colors in place.
    """
    count = radii.shape[0]
    for i in range(count):
        radius = radii[i]
        spin_angle = spin * radius
        # Sectors cycle with the index: 0, 1, ..., branches - 1, 0, 1, ...
        branch_angle = ((i % branches) / branches) * np.pi * 2.0
        angle = branch_angle + spin_angle

        positions[i, 0] = np.cos(angle) * radius + jitter[i, 0]
        positions[i, 1] = jitter[i, 1]
        positions[i, 2] = np.sin(angle) * radius + jitter[i, 2]

        mix = radius / max_radius if max_radius > 0.0 else 0.0
        mix_color(inside, outside, mix, colors[i])


def generate_galaxy(params: GalaxyParameters, rng) -> PointSet:
    """
    Builds a new point set from the parameters.

    All radius samples are drawn from `rng` first, then the jitter block,
    so a seeded generator always reproduces the same galaxy.
    """
    start = time.perf_counter()
    count = params.count

    radii = np.asarray(rng.random(count), dtype=np.float64) * params.radius
    jitter = (np.asarray(rng.random((count, 3)), dtype=np.float64) - 0.5) * params.randomness

    inside = np.array(hex_to_rgb(params.inside_color), dtype=np.float64)
    outside = np.array(hex_to_rgb(params.outside_color), dtype=np.float64)

    positions = np.empty((count, 3), dtype=np.float32)
    colors = np.empty((count, 3), dtype=np.float32)
    _fill_galaxy_numba(
        radii, jitter, params.branches, float(params.spin), float(params.radius),
        inside, outside, positions, colors
    )

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logging.info(
        f"Generated galaxy with {count} stars in {params.branches} branches "
        f"({elapsed_ms:.1f} ms)."
    )
    logging.debug(
        f"Point set arrays created. Positions shape: {positions.shape}, "
        f"Colors shape: {colors.shape}"
    )
    return PointSet(positions, colors, params.size)

# scene.py
"""
Holds the displayed galaxy and drives its animation state.

The GalaxyScene owns the active PointSet, rebuilds it when the parameter
panel finishes an edit, and turns elapsed time into the galaxy's rotation
about the vertical axis.
"""
import logging
import time
from typing import Callable, Optional

import numpy as np

from galaxy import GalaxyParameters, PointSet, generate_galaxy

# --- Data Contracts ---
#
# class GalaxyScene:
#   - __init__(self, params: GalaxyParameters, rng=None, seed=None):
#     - Inputs:
#       - params: shared with the parameter panel, which is its only writer.
#       - rng: random source for every regeneration. Defaults to
#         numpy.random.default_rng(seed).
#     - Side Effects: Generates the first point set.
#
#   - regenerate(self) -> PointSet:
#     - Side Effects: Builds a new point set, installs it, then releases the
#       previous one. At most two generations are alive during the swap.
#
#   - update(self, elapsed: float) -> None:
#     - Invariants: rotation_y == -(elapsed * params.rotate).


class ElapsedClock:
    """Monotonic seconds since construction."""
    def __init__(self, time_source: Callable[[], float] = time.perf_counter):
        self._time_source = time_source
        self._start = time_source()

    def elapsed(self) -> float:
        return self._time_source() - self._start


class GalaxyScene:
    """
    The scene graph for this program: one rotating point set.
    """
    def __init__(self, params: GalaxyParameters, rng=None, seed: Optional[int] = None):
        self.params = params
        # All randomness goes through one generator, seeded once.
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.rotation_y = 0.0
        self.generation = 0
        self.point_set: Optional[PointSet] = None
        self.regenerate()
        logging.info("Galaxy scene initialized.")

    def regenerate(self) -> PointSet:
        """Replaces the displayed point set with a freshly generated one."""
        new_set = generate_galaxy(self.params, self.rng)
        old_set, self.point_set = self.point_set, new_set
        if old_set is not None:
            old_set.release()
        self.generation += 1
        logging.debug(f"Point set generation {self.generation} installed.")
        return new_set

    def update(self, elapsed: float) -> None:
        """Sets the galaxy's orientation for the given elapsed time."""
        self.rotation_y = -(elapsed * self.params.rotate)

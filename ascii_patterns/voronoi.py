"""
Voronoi Swarm Source

A handful of points drift through normalized space and bounce off the
[0, 1] walls. The field value at a location is the gap between the
distances to its nearest and second-nearest point, which draws bright
cell borders between the points.

Velocities are expressed per reference frame (1/60 s at the default
frame delta) and scaled by dt, so swarm speed does not depend on how
many cells the grid has.
"""

import numpy as np
from .source_base import PatternSource


N_POINTS = 8
MAX_VELOCITY = 0.01
REFERENCE_DT = 0.016


class VoronoiSwarm(PatternSource):

    source_name = "voronoi"
    source_label = "Voronoi Swarm"

    def __init__(self, n_points=N_POINTS, seed=None):
        super().__init__(seed)
        self.n_points = n_points
        self.positions = np.zeros((n_points, 2), dtype=np.float64)
        self.velocities = np.zeros((n_points, 2), dtype=np.float64)
        self.reseed()

    def reseed(self, **_kw):
        self.positions = self.rng.random((self.n_points, 2))
        self.velocities = (self.rng.random((self.n_points, 2)) - 0.5) * 2 * MAX_VELOCITY
        self.generation = 0

    def advance(self, dt=REFERENCE_DT):
        """Move every point, reflecting velocity at the walls."""
        self.positions += self.velocities * (dt / REFERENCE_DT)
        hit = (self.positions <= 0.0) | (self.positions >= 1.0)
        self.velocities[hit] *= -1
        np.clip(self.positions, 0.0, 1.0, out=self.positions)
        self.generation += 1
        return self.positions

    def nearest_two(self, nx, ny):
        """Distances to the nearest and second-nearest point."""
        nx = np.asarray(nx, dtype=np.float64)[..., np.newaxis]
        ny = np.asarray(ny, dtype=np.float64)[..., np.newaxis]
        dist = np.sqrt((nx - self.positions[:, 0]) ** 2 +
                       (ny - self.positions[:, 1]) ** 2)
        if self.n_points < 2:
            return dist[..., 0], dist[..., 0]
        two = np.partition(dist, 1, axis=-1)
        return two[..., 0], two[..., 1]

    def query(self, nx, ny, time_offset=0.0):
        nearest, second = self.nearest_two(nx, ny)
        return ((second - nearest) * 10 + np.sin(time_offset * 100)) * 2 - 1

    @property
    def stats(self):
        return {
            "generation": self.generation,
            "mean_speed": float(np.linalg.norm(self.velocities, axis=1).mean()),
        }

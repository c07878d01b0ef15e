"""
Abstract Base Class for Stateful Pattern Sources

Two pattern kinds carry state between frames: the cellular automaton
and the Voronoi point swarm. Both implement this interface so the
renderer can advance them once per frame and query them any number of
times without side effects.
"""

from abc import ABC, abstractmethod
import numpy as np


class PatternSource(ABC):
    """Base class for frame-stateful scalar sources."""

    source_name = ""   # e.g. "cellular", "voronoi"
    source_label = ""  # e.g. "Game of Life", "Voronoi Swarm"

    def __init__(self, seed=None):
        self.rng = np.random.default_rng(seed)
        self.generation = 0

    @abstractmethod
    def advance(self, dt):
        """Advance the simulation by one frame of length dt."""

    @abstractmethod
    def query(self, nx, ny, time_offset=0.0):
        """Raw field value in roughly [-1, 1] at normalized coordinates.

        Must not mutate state: calling it once or once per cell gives the
        same simulation speed.
        """

    @abstractmethod
    def reseed(self, **kwargs):
        """Randomise the state (called when the pattern is activated)."""

    @property
    def stats(self):
        return {"generation": self.generation}

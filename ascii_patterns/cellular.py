"""
Game of Life Source - Fixed-Size Cellular Automaton

Owns a 40x30 boolean grid that is independent of the render grid: every
query is rescaled into this fixed domain. Supports arbitrary B/S
(birth/survival) rule notation, defaulting to Conway's B3/S23.

Edges do not wrap; neighbours outside the grid count as dead.
"""

import math

import numpy as np
from .source_base import PatternSource


CELL_COLS = 40
CELL_ROWS = 30
STEP_PERIOD = 30


def parse_rule(rule_str):
    """Parse B/S notation like 'B3/S23' into (birth_set, survive_set)."""
    rule_str = rule_str.upper().replace(" ", "")
    parts = rule_str.split("/")
    birth = set()
    survive = set()
    for part in parts:
        if part.startswith("B"):
            birth = {int(c) for c in part[1:]}
        elif part.startswith("S"):
            survive = {int(c) for c in part[1:]}
    return birth, survive


def _count_neighbors_bounded(cells):
    """Moore neighbourhood count with dead cells beyond the border."""
    h, w = cells.shape
    padded = np.pad(cells.astype(np.int32), 1)
    n = np.zeros((h, w), dtype=np.int32)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dy == 0 and dx == 0:
                continue
            n += padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]
    return n


def step_gate_open(time, speed):
    """True on the frames where the automaton should advance.

    Throttled by pattern time, not frame rate: one generation whenever
    floor(time * speed * 100) is a multiple of STEP_PERIOD.
    """
    tick = time * speed * 100
    if not math.isfinite(tick):
        return False
    return math.floor(tick) % STEP_PERIOD == 0


class CellularSource(PatternSource):

    source_name = "cellular"
    source_label = "Game of Life"

    def __init__(self, cols=CELL_COLS, rows=CELL_ROWS, rule="B3/S23",
                 density=0.4, seed=None):
        """
        Args:
            cols, rows: Automaton grid size (independent of render grid)
            rule: B/S rule notation string
            density: Probability a cell starts alive on reseed
            seed: RNG seed for reproducible reseeds
        """
        super().__init__(seed)
        self.cols = cols
        self.rows = rows
        self.rule_str = rule
        self.birth, self.survive = parse_rule(rule)
        self.density = density
        self.cells = np.zeros((rows, cols), dtype=bool)
        self.reseed()

    def step(self):
        """Advance one generation into a fresh grid."""
        neighbors = _count_neighbors_bounded(self.cells)
        alive = self.cells
        born = ~alive & np.isin(neighbors, list(self.birth))
        survives = alive & np.isin(neighbors, list(self.survive))
        self.cells = born | survives
        self.generation += 1
        return self.cells

    def advance(self, dt):
        return self.step()

    def query(self, nx, ny, time_offset=0.0):
        nx = np.asarray(nx, dtype=np.float64)
        ny = np.asarray(ny, dtype=np.float64)
        with np.errstate(invalid="ignore"):
            cx = np.floor(np.nan_to_num(nx, nan=-1.0) * self.cols).astype(np.int64)
            cy = np.floor(np.nan_to_num(ny, nan=-1.0) * self.rows).astype(np.int64)
        inside = (cx >= 0) & (cx < self.cols) & (cy >= 0) & (cy < self.rows)
        live = self.cells[np.clip(cy, 0, self.rows - 1), np.clip(cx, 0, self.cols - 1)]
        return np.where(inside & live, 1.0, -1.0)

    def reseed(self, density=None, **_kw):
        if density is not None:
            self.density = density
        self.cells = self.rng.random((self.rows, self.cols)) < self.density
        self.generation = 0

    def set_rule(self, rule):
        self.rule_str = rule
        self.birth, self.survive = parse_rule(rule)

    def set_cells(self, cells):
        """Replace the grid (shape must match rows x cols)."""
        cells = np.asarray(cells, dtype=bool)
        if cells.shape != (self.rows, self.cols):
            raise ValueError(f"Expected shape {(self.rows, self.cols)}, got {cells.shape}")
        self.cells = cells.copy()

    def clear(self):
        self.cells[:] = False
        self.generation = 0

    @property
    def stats(self):
        alive_count = int(self.cells.sum())
        return {
            "generation": self.generation,
            "alive": alive_count,
            "alive_pct": alive_count / self.cells.size * 100,
        }

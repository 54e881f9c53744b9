import numpy as np
from typing import List


class StateGenerator:
    '''
    Seeded random initial states. Border cells are cleared by default, so the
    result can be used directly with a frozen or reset boundary.
    '''
    def __init__(self, *, seed: int = 42, density: float = 0.5, num_states: int = 2):
        if not 0.0 <= density <= 1.0:
            raise ValueError("density must be in [0, 1]")
        self.density = density
        self.num_states = num_states
        self.rng = np.random.default_rng(seed)

    def _cell(self) -> int:
        '''
        Dead (0) with probability 1 - density, otherwise a uniformly chosen live state.
        '''
        if self.rng.random() >= self.density:
            return 0
        return int(self.rng.integers(1, self.num_states))

    def line(self, size: int, clear_border: bool = True) -> List[int]:
        state = [self._cell() for _ in range(size)]
        if clear_border and size:
            state[0] = state[-1] = 0
        return state

    def grid(self, height: int, width: int, clear_border: bool = True) -> List[List[int]]:
        """
        Generate a random height x width grid with the given density.
        """
        grid = [[self._cell() for _ in range(width)] for _ in range(height)]
        if clear_border:
            for r in range(height):
                for c in range(width):
                    if r in (0, height - 1) or c in (0, width - 1):
                        grid[r][c] = 0
        return grid

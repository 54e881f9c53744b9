from presets import beehive, glider, toad
from rules import GAME_OF_LIFE, OuterTotalisticRule
from simulate import (
    BoundaryPolicy,
    count_affected,
    evolve_2d,
    run_until_stable,
    simulate_2d,
    step_2d,
)


def _grid(dims, cells):
    rows, cols = dims
    grid = [[0] * cols for _ in range(rows)]
    for r, c in cells:
        grid[r][c] = 1
    return grid


def test_step2d_zero_rule_blanket():
    rule = OuterTotalisticRule("0" * 18)          # everything dies
    grid = [[1, 1, 1], [1, 1, 1], [1, 1, 1]]
    expected = [[1, 1, 1], [1, 0, 1], [1, 1, 1]]  # frozen border survives
    assert step_2d(grid, rule) == expected


def test_step2d_empty_grid():
    assert step_2d([], GAME_OF_LIFE) == []


def test_beehive_is_still():
    assert step_2d(beehive(), GAME_OF_LIFE) == beehive()


def test_toad_has_period_two():
    start = toad()
    once = step_2d(start, GAME_OF_LIFE)
    assert once != start
    assert step_2d(once, GAME_OF_LIFE) == start


def test_glider_moves_diagonally():
    moved = simulate_2d(glider(), GAME_OF_LIFE, 4)
    expected = _grid((8, 8), [(2, 3), (3, 4), (4, 2), (4, 3), (4, 4)])
    assert moved == expected


def test_evolve_2d_does_not_mutate():
    start = glider()
    history = evolve_2d(start, GAME_OF_LIFE, 3)
    assert len(history) == 4
    assert history[0] == glider()
    assert start == glider()


def test_wrap_blinker_across_the_corner():
    grid = _grid((5, 5), [(0, 4), (0, 0), (0, 1)])
    nxt = step_2d(grid, GAME_OF_LIFE, BoundaryPolicy.WRAP)
    assert nxt == _grid((5, 5), [(4, 0), (0, 0), (1, 0)])


def test_reset_border():
    full = [[1] * 3 for _ in range(3)]
    assert step_2d(full, GAME_OF_LIFE, BoundaryPolicy.RESET) == [[0] * 3 for _ in range(3)]
    assert step_2d(full, GAME_OF_LIFE, BoundaryPolicy.FROZEN) == [[1, 1, 1], [1, 0, 1], [1, 1, 1]]


def test_count_affected_counts_changes():
    grid = _grid((3, 3), [(1, 1)])
    nxt = step_2d(grid, GAME_OF_LIFE)
    assert count_affected(grid, nxt, GAME_OF_LIFE) == 1


def test_run_until_stable_on_still_life():
    result = run_until_stable(beehive(), GAME_OF_LIFE)
    assert result.grid == beehive()
    assert result.iterations == 1
    assert result.affected == 0


def test_run_until_stable_lone_cell_dies():
    result = run_until_stable(_grid((3, 3), [(1, 1)]), GAME_OF_LIFE)
    assert result.grid == [[0] * 3 for _ in range(3)]
    assert result.iterations == 2
    assert result.affected == 1


def test_reset_fill_through_the_drivers():
    rule = OuterTotalisticRule("0" * 18)
    blank = [[0] * 3 for _ in range(3)]
    ringed = [[1, 1, 1], [1, 0, 1], [1, 1, 1]]
    assert simulate_2d(blank, rule, 1, BoundaryPolicy.RESET, fill=1) == ringed
    assert evolve_2d(blank, rule, 2, BoundaryPolicy.RESET, fill=1)[-1] == ringed


def test_run_until_stable_gives_up_on_oscillators():
    result = run_until_stable(toad(), GAME_OF_LIFE, max_iterations=50)
    assert not result.stable
    assert result.iterations == 50
    assert result.grid == toad()          # even number of steps, period 2


def test_stable_flag_set_on_fixpoint():
    assert run_until_stable(beehive(), GAME_OF_LIFE).stable

"""
run_automaton.py

Run one automaton and write its history as JSONL, one record per tick
(or per dropped grain for the sandpile).

Example (elementary CA, rule 30)
-------
python run_automaton.py --mode 1d \
       --rule 30 --size 201 --timesteps 99 \
       --outfile data/rule30.jsonl

Example (Game of Life glider)
-------
python run_automaton.py --mode life \
       --pattern glider --timesteps 8 \
       --outfile data/glider.jsonl

Example (sandpile avalanches)
-------
python run_automaton.py --mode sandpile \
       --dim 50 --level 30 --drops 1000 --seed 7 \
       --outfile data/avalanches.jsonl

Example (tape machine)
-------
python run_automaton.py --mode tape \
       --machine palindrome --word 1,2,3,2,1 \
       --outfile data/palindrome.jsonl
"""

from __future__ import annotations
import argparse, json, pathlib
from typing import Any, Dict, Iterable, List

import numpy as np
from generate import StateGenerator
from loaders import embed, read_rule_file, read_state_file, read_tape_program
from machines import busy_beaver_3, palindrome_checker, palindrome_machine
from presets import beehive, glider, langton_start, r_pentomino, single_seed, toad
from rules import GAME_OF_LIFE, ElementaryRule, OuterTotalisticRule
from run_logger import log_run
from sandpile import avalanches, make_pile, relax
from simulate import BoundaryPolicy, evolve, evolve_2d
from tape import TapeMachine, run_machine

PATTERNS = {
    "beehive": beehive,
    "toad": toad,
    "glider": glider,
    "r-pentomino": r_pentomino,
}

BOUNDARIES = [b.value for b in BoundaryPolicy]


def write_jsonl(outfile: pathlib.Path, records: Iterable[Dict[str, Any]]) -> int:
    """
    Write one compact JSON object per line; returns the number of lines.
    """
    outfile.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with outfile.open("w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record, separators=(",", ":")) + "\n")
            n += 1
    return n


def _finish(kind: str, summary: Dict[str, Any]) -> Dict[str, Any]:
    log_run(kind, summary)
    return summary


def build_parser_1d() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run a 1-D elementary cellular automaton.")
    p.add_argument("--rule", type=int, required=True, help="Wolfram rule number (0-255).")
    p.add_argument("--size", type=int, default=21, help="Length of the 1-D lattice.")
    p.add_argument("--timesteps", type=int, default=9, help="Number of steps to run.")
    p.add_argument("--boundary", choices=BOUNDARIES, default="frozen", help="Boundary policy for the end cells.")
    p.add_argument("--random", action="store_true", help="Random start instead of a single centred live cell.")
    p.add_argument("--density", type=float, default=0.5, help="Probability a cell is alive in a random start.")
    p.add_argument("--seed", type=int, default=42, help="RNG seed for reproducibility.")
    p.add_argument("--outfile", type=pathlib.Path, required=True, help="Where to write the JSONL.")
    return p


def main_1d(argv: List[str] | None = None) -> Dict[str, Any]:
    args = build_parser_1d().parse_args(argv)

    rule = ElementaryRule.from_int(args.rule)
    if args.random:
        start = StateGenerator(seed=args.seed, density=args.density).line(args.size)
    else:
        start = single_seed(args.size)

    history = evolve(start, rule, args.timesteps, BoundaryPolicy(args.boundary))
    n = write_jsonl(
        args.outfile,
        ({"step": i, "state": "".join(map(str, s))} for i, s in enumerate(history)),
    )
    print(f"Wrote {n:,} snapshots of rule {args.rule} to {args.outfile}")
    return _finish("1d", {"rule": args.rule, "snapshots": n, "outfile": str(args.outfile)})


def build_parser_life() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run a 2-D outer-totalistic automaton (Game of Life by default).")
    p.add_argument("--rule", default=GAME_OF_LIFE.to_string(), help="Birth/Survival notation, e.g. B3/S23.")
    p.add_argument("--pattern", choices=sorted(PATTERNS) + ["random"], default="glider", help="Starting pattern.")
    p.add_argument("--height", type=int, default=16, help="Grid height (random pattern only).")
    p.add_argument("--width", type=int, default=16, help="Grid width (random pattern only).")
    p.add_argument("--density", type=float, default=0.5, help="Probability a cell starts alive.")
    p.add_argument("--seed", type=int, default=42, help="RNG seed.")
    p.add_argument("--timesteps", type=int, default=4, help="Number of steps to run.")
    p.add_argument("--boundary", choices=BOUNDARIES, default="frozen", help="Boundary policy.")
    p.add_argument("--outfile", type=pathlib.Path, required=True, help="Output JSONL.")
    return p


def main_life(argv: List[str] | None = None) -> Dict[str, Any]:
    args = build_parser_life().parse_args(argv)

    rule = OuterTotalisticRule.from_string(args.rule)
    if args.pattern == "random":
        start = StateGenerator(seed=args.seed, density=args.density).grid(args.height, args.width)
    else:
        start = PATTERNS[args.pattern]()

    history = evolve_2d(start, rule, args.timesteps, BoundaryPolicy(args.boundary))
    n = write_jsonl(args.outfile, ({"step": i, "grid": g} for i, g in enumerate(history)))
    print(f"Wrote {n:,} {rule.to_string()} snapshots to {args.outfile}")
    return _finish("life", {"rule": rule.to_string(), "pattern": args.pattern, "snapshots": n, "outfile": str(args.outfile)})


def build_parser_langton() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run Langton's loops from a rule file.")
    p.add_argument("--rules", type=pathlib.Path, required=True, help="Rule file, one '<c><t><r><b><l><n>' rule per line.")
    p.add_argument("--start", type=pathlib.Path, help="Start layout file (defaults to the classic loop).")
    p.add_argument("--height", type=int, default=40, help="Grid height.")
    p.add_argument("--width", type=int, default=40, help="Grid width.")
    p.add_argument("--timesteps", type=int, default=100, help="Number of steps to run.")
    p.add_argument("--outfile", type=pathlib.Path, required=True, help="Output JSONL.")
    return p


def main_langton(argv: List[str] | None = None) -> Dict[str, Any]:
    args = build_parser_langton().parse_args(argv)

    rule = read_rule_file(args.rules)
    dims = (args.height, args.width)
    start = embed(read_state_file(args.start), dims) if args.start else langton_start(dims)

    history = evolve_2d(start, rule, args.timesteps, BoundaryPolicy.FROZEN)
    n = write_jsonl(args.outfile, ({"step": i, "grid": g} for i, g in enumerate(history)))
    print(f"Wrote {n:,} Langton snapshots ({len(rule):,} rules) to {args.outfile}")
    return _finish("langton", {"rules": len(rule), "snapshots": n, "outfile": str(args.outfile)})


def build_parser_sandpile() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Relax a sandpile, then record the avalanche of every dropped grain.")
    p.add_argument("--dim", type=int, default=22, help="Grid size including the border.")
    p.add_argument("--level", type=int, default=10, help="Initial grains per interior cell.")
    p.add_argument("--threshold", type=int, default=3, help="A cell topples when it holds more grains than this.")
    p.add_argument("--drops", type=int, default=200, help="Number of grains to drop after the initial relaxation.")
    p.add_argument("--seed", type=int, default=42, help="RNG seed.")
    p.add_argument("--outfile", type=pathlib.Path, required=True, help="Output JSONL.")
    return p


def main_sandpile(argv: List[str] | None = None) -> Dict[str, Any]:
    """
    The first record is the initial relaxation (drop 0); each further record
    holds the duration T and size S of one avalanche.
    """
    args = build_parser_sandpile().parse_args(argv)

    settled = relax(make_pile(args.dim, args.level), args.threshold)
    rng = np.random.default_rng(args.seed)

    def records():
        yield {"drop": 0, "duration": settled.iterations, "size": settled.affected}
        trials = avalanches(settled.grid, args.drops, rng, args.threshold)
        for i, av in enumerate(trials, 1):
            yield {"drop": i, "row": av.position[0], "col": av.position[1], "duration": av.duration, "size": av.size}

    n = write_jsonl(args.outfile, records())
    print(
        f"Initial relaxation took {settled.iterations:,} steps and {settled.affected:,} topplings; "
        f"wrote {n - 1:,} avalanches to {args.outfile}"
    )
    return _finish(
        "sandpile",
        {
            "dim": args.dim,
            "level": args.level,
            "initial_steps": settled.iterations,
            "initial_topplings": settled.affected,
            "drops": n - 1,
            "outfile": str(args.outfile),
        },
    )


def _symbols(text: str) -> List[int]:
    return [int(s) for s in text.split(",") if s.strip()]


def build_parser_tape() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run a tape machine until it halts.")
    p.add_argument("--machine", choices=["busy-beaver", "palindrome"], help="Bundled program.")
    p.add_argument("--program", type=pathlib.Path, help="Program file, '<state> <read> <write> <L|R> <next>' per line.")
    p.add_argument("--start-state", default="A", help="Start state for --program.")
    p.add_argument("--halting", default="H", help="Comma-separated halting states for --program.")
    p.add_argument("--word", type=_symbols, default=[], help="Palindrome input, e.g. 1,2,3,2,1.")
    p.add_argument("--tape", type=_symbols, default=[], help="Initial tape for --program / busy-beaver, e.g. 0,0,1.")
    p.add_argument("--head", type=int, default=0, help="Initial head index for --tape.")
    p.add_argument("--max-steps", type=int, default=10_000, help="Give up after this many steps.")
    p.add_argument("--outfile", type=pathlib.Path, required=True, help="Output JSONL.")
    return p


def main_tape(argv: List[str] | None = None) -> Dict[str, Any]:
    parser = build_parser_tape()
    args = parser.parse_args(argv)
    if (args.machine is None) == (args.program is None):
        parser.error("give exactly one of --machine or --program")

    if args.machine == "palindrome":
        program = palindrome_checker(range(10))
        machine = palindrome_machine(args.word, program)
    else:
        if args.machine == "busy-beaver":
            program = busy_beaver_3()
        else:
            program = read_tape_program(args.program, args.start_state, args.halting.split(","))
        machine = TapeMachine.start(program, args.tape, args.head)

    run = run_machine(machine, program, max_steps=args.max_steps, keep_history=True)
    n = write_jsonl(
        args.outfile,
        (
            {"step": i, "state": str(m.state), "head": m.head, "tape": list(m.tape)}
            for i, m in enumerate(run.history)
        ),
    )
    final = run.machine
    if run.halted:
        print(f"Halted in state {final.state} after {run.steps:,} steps; wrote {n:,} snapshots to {args.outfile}")
    else:
        print(f"No halt within {args.max_steps:,} steps; wrote {n:,} snapshots to {args.outfile}")
    return _finish(
        "tape",
        {
            "halted": run.halted,
            "final_state": str(final.state),
            "steps": run.steps,
            "ones": final.ones(program.blank),
            "outfile": str(args.outfile),
        },
    )


MODES = {
    "1d": main_1d,
    "life": main_life,
    "langton": main_langton,
    "sandpile": main_sandpile,
    "tape": main_tape,
}


def dispatch_main(argv: List[str] | None = None) -> Dict[str, Any]:
    """
    Dispatcher that invokes the runner for --mode.
    """
    # parse only --mode, leave the rest of arguments for the specific main
    top = argparse.ArgumentParser(add_help=False)
    top.add_argument(
        "--mode",
        choices=sorted(MODES),
        default="1d",
        help="Which automaton to run",
    )
    args, remaining = top.parse_known_args(argv)
    return MODES[args.mode](remaining)


if __name__ == "__main__":
    dispatch_main()

#!/usr/bin/env python
"""
orchestrator.py
---------------
Run a batch of automata described in experiments.yaml:

1. For each experiment:
    - validate its entry (name, mode, args)
    - run it through run_automaton.py in-process
    - append a summary row to results/runs.csv
2. Exit non-zero if any experiment failed; the others still run.

experiments.yaml
    experiments:
      - name: rule30
        mode: 1d
        args: {rule: 30, size: 201, timesteps: 99}
"""
from __future__ import annotations

import argparse
import csv
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import yaml

from run_automaton import MODES, dispatch_main

# Paths & Globals
ROOT       = Path(__file__).resolve().parent
DATA_DIR   = ROOT / "data"
RESULT_DIR = ROOT / "results"

EXPERIMENT_SCHEMA = {
    "name": str,
    "mode": str,
    "args": dict,
}


def validate_experiment(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Fill defaults and check types; raises ValueError/TypeError on a bad entry."""
    exp = {"args": {}, **entry}
    for key, expected_type in EXPERIMENT_SCHEMA.items():
        if key not in exp:
            raise ValueError(f"Missing required experiment key: {key}")
        if not isinstance(exp[key], expected_type):
            raise TypeError(f"Experiment key '{key}' expected {expected_type.__name__}, got {type(exp[key]).__name__}.")
    if exp["mode"] not in MODES:
        raise ValueError(f"Unknown mode {exp['mode']!r} in experiment '{exp['name']}'")
    return exp


def load_experiments(cfg_path: Path) -> List[Dict[str, Any]]:
    doc = yaml.safe_load(Path(cfg_path).read_text(encoding="utf-8")) or {}
    entries = doc.get("experiments")
    if not isinstance(entries, list):
        raise ValueError(f"{cfg_path}: expected a list under 'experiments'")
    experiments = [validate_experiment(e) for e in entries]
    names = [e["name"] for e in experiments]
    if len(names) != len(set(names)):
        raise ValueError(f"{cfg_path}: experiment names must be unique")
    return experiments


def to_argv(exp: Dict[str, Any], data_dir: Path) -> List[str]:
    """Turn an experiment entry into command-line arguments for run_automaton."""
    args = dict(exp["args"])
    args.setdefault("outfile", str(data_dir / f"{exp['name']}.jsonl"))
    argv = ["--mode", exp["mode"]]
    for k, v in args.items():
        flag = f"--{k.replace('_', '-')}"
        if v is True:
            argv.append(flag)
        elif v is False or v is None:
            continue
        elif isinstance(v, list):
            argv += [flag, ",".join(map(str, v))]
        else:
            argv += [flag, str(v)]
    return argv


# Main orchestration
def run(
    cfg_path: Path,
    *,
    data_dir: Path = DATA_DIR,
    result_dir: Path = RESULT_DIR,
    only: str | None = None,
) -> List[Dict[str, Any]]:
    experiments = load_experiments(cfg_path)
    data_dir.mkdir(parents=True, exist_ok=True)
    result_dir.mkdir(parents=True, exist_ok=True)

    runs_path   = result_dir / "runs.csv"
    first_write = not runs_path.exists()
    summaries: List[Dict[str, Any]] = []
    failed: List[str] = []

    with runs_path.open("a", newline="") as fp_runs:
        writer = csv.writer(fp_runs)
        if first_write:
            writer.writerow(["date_utc", "experiment", "mode", "outfile", "summary"])

        for exp in experiments:
            # skip experiments not matching --only (if provided)
            if only is not None and exp["name"] != only:
                continue

            argv = to_argv(exp, data_dir)
            print(f"Running {exp['name']}: {' '.join(argv)}")
            try:
                summary = dispatch_main(argv)
            except (ValueError, LookupError, OSError) as exc:
                print(f"Experiment {exp['name']} failed: {exc}", file=sys.stderr)
                failed.append(exp["name"])
                continue
            except SystemExit as exc:
                # argparse rejected the args; its usage message is already on stderr
                print(f"Experiment {exp['name']} failed: bad arguments (exit {exc.code})", file=sys.stderr)
                failed.append(exp["name"])
                continue

            writer.writerow([
                datetime.now(timezone.utc).isoformat(timespec="seconds"),
                exp["name"],
                exp["mode"],
                summary["outfile"],
                json.dumps(summary, separators=(",", ":")),
            ])
            fp_runs.flush()
            summaries.append(summary)

    if failed:
        sys.exit(f"{len(failed)} experiment(s) failed: {', '.join(failed)}")
    return summaries


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a batch of automata from experiments.yaml")
    parser.add_argument(
        "--config",
        type=Path,
        default=ROOT / "experiments.yaml",
        help="Path to experiments.yaml",
    )
    parser.add_argument(
        "--only",
        help="If set, only run this experiment (must match one of the names in the config)",
    )
    args = parser.parse_args()
    run(args.config, only=args.only)

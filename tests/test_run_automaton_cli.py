import json

import pytest
from presets import glider
from rules import MissingTransitionError
from run_automaton import dispatch_main, main_1d, main_langton, main_life, main_sandpile, main_tape


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path, monkeypatch):
    # run logs land in ./logs
    monkeypatch.chdir(tmp_path)


def _records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_1d_writes_jsonl(tmp_path):
    outfile = tmp_path / "rule50.jsonl"
    summary = main_1d(["--rule", "50", "--size", "21", "--timesteps", "3", "--outfile", str(outfile)])

    records = _records(outfile)
    assert len(records) == 4
    assert summary["snapshots"] == 4
    assert records[0]["state"] == "0" * 10 + "1" + "0" * 10
    assert records[1]["state"] == "0" * 9 + "101" + "0" * 9
    assert [r["step"] for r in records] == [0, 1, 2, 3]


def test_1d_random_start_is_seeded(tmp_path):
    a, b = tmp_path / "a.jsonl", tmp_path / "b.jsonl"
    common = ["--rule", "110", "--size", "30", "--timesteps", "2", "--random", "--seed", "9"]
    main_1d(common + ["--outfile", str(a)])
    main_1d(common + ["--outfile", str(b)])
    assert a.read_text() == b.read_text()


def test_runs_are_logged(tmp_path):
    main_1d(["--rule", "30", "--outfile", str(tmp_path / "x.jsonl")])
    entries = _records(tmp_path / "logs" / "runs.log")
    assert entries[-1]["kind"] == "1d"
    assert entries[-1]["rule"] == 30
    assert "ts" in entries[-1]


def test_life_glider(tmp_path):
    outfile = tmp_path / "glider.jsonl"
    summary = main_life(["--pattern", "glider", "--timesteps", "4", "--outfile", str(outfile)])

    records = _records(outfile)
    assert len(records) == 5
    assert records[0]["grid"] == glider()
    assert sum(map(sum, records[-1]["grid"])) == 5
    assert summary["rule"] == "B3/S23"


def test_life_bad_rule(tmp_path):
    with pytest.raises(ValueError):
        main_life(["--rule", "nonsense", "--outfile", str(tmp_path / "x.jsonl")])


def _langton_files(tmp_path, rules):
    rules_path = tmp_path / "rules.txt"
    rules_path.write_text("\n".join(rules) + "\n")
    start_path = tmp_path / "start.txt"
    start_path.write_text("1\n")
    return rules_path, start_path


def test_langton_from_files(tmp_path):
    rules_path, start_path = _langton_files(tmp_path, ["000000", "010000", "100001"])
    outfile = tmp_path / "loop.jsonl"
    summary = main_langton([
        "--rules", str(rules_path), "--start", str(start_path),
        "--height", "5", "--width", "5", "--timesteps", "2", "--outfile", str(outfile),
    ])

    records = _records(outfile)
    assert summary["rules"] == 6
    assert len(records) == 3
    assert records[-1]["grid"] == records[0]["grid"]
    assert records[0]["grid"][2][2] == 1


def test_langton_missing_rule(tmp_path):
    rules_path, start_path = _langton_files(tmp_path, ["000000", "100001"])
    with pytest.raises(MissingTransitionError):
        main_langton([
            "--rules", str(rules_path), "--start", str(start_path),
            "--height", "5", "--width", "5", "--outfile", str(tmp_path / "x.jsonl"),
        ])


def test_sandpile(tmp_path):
    outfile = tmp_path / "pile.jsonl"
    summary = main_sandpile(["--dim", "7", "--level", "4", "--drops", "3", "--outfile", str(outfile)])

    records = _records(outfile)
    assert len(records) == 4
    assert records[0]["drop"] == 0
    assert records[0]["duration"] == summary["initial_steps"]
    assert records[0]["size"] == summary["initial_topplings"] > 0
    for rec in records[1:]:
        assert 1 <= rec["row"] <= 5 and 1 <= rec["col"] <= 5
        assert rec["duration"] >= 1
    assert summary["drops"] == 3


def test_tape_busy_beaver(tmp_path):
    outfile = tmp_path / "bb.jsonl"
    summary = main_tape(["--machine", "busy-beaver", "--outfile", str(outfile)])

    assert summary["halted"] is True
    assert summary["steps"] == 13
    assert summary["ones"] == 6
    assert summary["final_state"] == "H"
    records = _records(outfile)
    assert len(records) == 14
    assert records[-1]["tape"] == [1] * 6


@pytest.mark.parametrize("word,state", [("1,2,3,2,1", "qy"), ("1,2", "qn")])
def test_tape_palindrome(tmp_path, word, state):
    summary = main_tape(["--machine", "palindrome", "--word", word, "--outfile", str(tmp_path / "p.jsonl")])
    assert summary["final_state"] == state


def test_tape_program_file(tmp_path):
    program = tmp_path / "flip.txt"
    program.write_text("S 0 1 R S\nS 1 0 R S\n")
    summary = main_tape([
        "--program", str(program), "--start-state", "S", "--halting", "H",
        "--tape", "1,0,1", "--max-steps", "3", "--outfile", str(tmp_path / "flip.jsonl"),
    ])
    assert summary["halted"] is False
    assert summary["steps"] == 3
    assert summary["ones"] == 1


def test_tape_needs_exactly_one_source(tmp_path):
    with pytest.raises(SystemExit):
        main_tape(["--outfile", str(tmp_path / "x.jsonl")])
    with pytest.raises(SystemExit):
        main_tape(["--machine", "busy-beaver", "--program", "p.txt", "--outfile", str(tmp_path / "x.jsonl")])


def test_dispatch(tmp_path):
    outfile = tmp_path / "toad.jsonl"
    summary = dispatch_main(["--mode", "life", "--pattern", "toad", "--timesteps", "2", "--outfile", str(outfile)])
    records = _records(outfile)
    assert records[0]["grid"] == records[2]["grid"]
    assert summary["pattern"] == "toad"


def test_tape_word_outside_alphabet(tmp_path):
    with pytest.raises(ValueError, match="alphabet"):
        main_tape(["--machine", "palindrome", "--word", "1,12", "--outfile", str(tmp_path / "p.jsonl")])

from __future__ import annotations

import json
import pathlib
import time
from typing import Any, Dict

# Path to the global run log file
LOG_PATH = pathlib.Path("logs") / "runs.log"


def log_run(kind: str, record: Dict[str, Any], *, log_file: pathlib.Path = LOG_PATH) -> None:
    """Append a summary of one simulation run to the log file.

    Each line is a JSON object with the keys:
      - ts: ISO timestamp (UTC)
      - kind: which automaton ran (1d, life, langton, sandpile, tape)
      - the fields of `record`, e.g. steps taken and output path
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    entry = {
        "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "kind": kind,
        **record,
    }
    with log_file.open("a", encoding="utf-8") as fp:
        fp.write(json.dumps(entry, ensure_ascii=False) + "\n")

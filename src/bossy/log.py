"""Timestamped CLI output for `bossy run`, with GitHub Actions error annotations."""

import os
import sys
from datetime import datetime


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _is_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def info(msg: str) -> None:
    print(f"[{_timestamp()}] {msg}", flush=True)


def error(msg: str) -> None:
    if _is_github_actions():
        # annotations must fit on one line
        annotation = msg.replace("\n", "%0A")
        print(f"::error::{annotation}", flush=True)
    print(f"[{_timestamp()}] ERROR: {msg}", file=sys.stderr, flush=True)

"""Console status lines, optionally mirrored to an append-only log file."""

import os
from datetime import datetime

_log_path = ""


def set_log_file(path: str) -> None:
    """Mirror every status line to `path` (empty string disables the file)."""
    global _log_path
    _log_path = path or ""
    if _log_path:
        os.makedirs(os.path.dirname(_log_path) or ".", exist_ok=True)


def print_safe(text: str) -> None:
    """Print text safely on consoles that are not UTF-8 capable."""
    try:
        print(text)
    except UnicodeEncodeError:
        print(text.encode("ascii", "backslashreplace").decode())


def log_progress(stage: str, detail: str, status: str = "OK") -> None:
    """Print a status line and append it to the log file when one is set."""
    print_safe(f"  {status} {stage}: {detail}")
    if not _log_path:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    try:
        with open(_log_path, "a", encoding="utf-8") as file:
            file.write(f"[{timestamp}] {status} {stage}: {detail}\n")
    except OSError as exc:
        print_safe(f"  WARN LOG: cannot write {_log_path}: {exc}")

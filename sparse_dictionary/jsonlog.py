"""
Structured JSON event records for command-line runs.

Each record is one line on stdout:
    {"ts": 1640995200.0, "event": "learn_done", "objective": 1.25, "iterations": 7}
"""

import json, sys, time


def log(event: str, **fields):
    """Write one JSON record with a timestamp, the event name and ``fields``."""
    rec = {"ts": time.time(), "event": event}
    rec.update(fields)
    sys.stdout.write(json.dumps(rec, default=_jsonable) + "\n")
    sys.stdout.flush()


def _jsonable(value):
    # numpy scalars and arrays
    if hasattr(value, "tolist"):
        return value.tolist()
    return str(value)

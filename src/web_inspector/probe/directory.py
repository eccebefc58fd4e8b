from __future__ import annotations

import os
from pathlib import Path


def is_empty_or_missing(path: str | Path) -> bool:
    """
    Return True when path cannot be listed or has no entries.

    Any OS error counts as empty, so an unreadable location is skipped as
    not found instead of failing the run.
    """
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError:
        return True

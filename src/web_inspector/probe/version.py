from __future__ import annotations

from typing import Optional

PACKAGES_SEPARATOR = "|"


def parse_version_output(text: str) -> tuple[str, Optional[str]]:
    """
    Split script output into version and packages info.

    Output is VERSION or VERSION|PACKAGE_INFO. Only the first pipe separates,
    anything after it is kept verbatim as packages info. No format validation.
    """
    parts = text.strip().split(PACKAGES_SEPARATOR, 1)
    version = parts[0]
    packages = parts[1] if len(parts) == 2 and parts[1] else None
    return version, packages

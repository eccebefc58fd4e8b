"""
Inspector configuration.

The inspector reads an INI file, by default /etc/desk/inspector.conf.

Example
[inspector]
scripts = /usr/local/lib/inspector/scripts
timeout = 60

[couchdb]
uri = http://10.0.0.100:5984
db = desk_drawer
user = inspector
password = secret

[inspector_scripts]
nginx = NGINX Web Server
wordpress = WordPress

Credentials only ever come from this file.
"""

from __future__ import annotations

import configparser
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from web_inspector.core.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("/etc/desk/inspector.conf")
DEFAULT_SCRIPT_TIMEOUT_SECONDS = 60.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class CouchDBConfig:
    """
    CouchDB connection settings.

    design and view name the view used to fetch service records.
    """

    uri: str
    db: str
    user: Optional[str] = None
    password: Optional[str] = None
    design: str = "desk_drawer"
    view: str = "service_type"
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS


@dataclass(frozen=True)
class InspectorConfig:
    """
    Full inspector configuration.

    scripts_path
    Directory holding one <subtype>.sh script per technology.

    titles
    Display title per subtype, from the inspector_scripts section.

    items_file
    When set, service items are read from this local json file instead of
    the CouchDB view.
    """

    scripts_path: Path
    couchdb: CouchDBConfig
    titles: Dict[str, str] = field(default_factory=dict)
    script_timeout_seconds: float = DEFAULT_SCRIPT_TIMEOUT_SECONDS
    hostname: str = ""
    items_file: Optional[Path] = None


def _required(parser: configparser.ConfigParser, section: str, key: str) -> str:
    value = parser.get(section, key, fallback="").strip()
    if not value:
        raise ConfigError(f"missing required option {section}.{key}")
    return value


def _optional(parser: configparser.ConfigParser, section: str, key: str) -> Optional[str]:
    value = parser.get(section, key, fallback="").strip()
    return value or None


def _seconds(parser: configparser.ConfigParser, section: str, key: str, default: float) -> float:
    try:
        value = parser.getfloat(section, key, fallback=default)
    except ValueError as exc:
        raise ConfigError(f"option {section}.{key} must be a number") from exc
    if value <= 0:
        raise ConfigError(f"option {section}.{key} must be positive")
    return value


def parse_config(text: str) -> InspectorConfig:
    """Parse INI text into an InspectorConfig."""
    # interpolation off so passwords may contain %
    parser = configparser.ConfigParser(interpolation=None)
    # subtype keys keep their case
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        raise ConfigError(f"invalid config file: {exc}") from exc

    couchdb = CouchDBConfig(
        uri=_required(parser, "couchdb", "uri").rstrip("/"),
        db=_required(parser, "couchdb", "db"),
        user=_optional(parser, "couchdb", "user"),
        password=_optional(parser, "couchdb", "password"),
        design=_optional(parser, "couchdb", "design") or "desk_drawer",
        view=_optional(parser, "couchdb", "view") or "service_type",
        timeout_seconds=_seconds(parser, "couchdb", "timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
    )

    titles: Dict[str, str] = {}
    if parser.has_section("inspector_scripts"):
        for key, value in parser.items("inspector_scripts"):
            titles[key] = value.strip()

    items_file = _optional(parser, "inspector", "items_file")

    return InspectorConfig(
        scripts_path=Path(_required(parser, "inspector", "scripts")),
        couchdb=couchdb,
        titles=titles,
        script_timeout_seconds=_seconds(
            parser, "inspector", "timeout", DEFAULT_SCRIPT_TIMEOUT_SECONDS
        ),
        hostname=_optional(parser, "inspector", "hostname") or socket.gethostname(),
        items_file=Path(items_file) if items_file else None,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> InspectorConfig:
    """Load configuration from an INI file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    return parse_config(text)

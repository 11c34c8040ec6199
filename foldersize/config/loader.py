from __future__ import annotations

import json
import os

from result import Err, Ok, Result

from foldersize.config.defaults import default_config
from foldersize.config.schema import AppConfig, from_dict
from foldersize.services.fs import DEFAULT_FS, FileSystem

CONFIG_PATH = "~/.config/folder-size/config.json"


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    resolved = path or fs.expanduser(CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        payload = json.loads(fs.read_text(resolved))
    except (OSError, ValueError) as exc:
        return Err(f"Failed reading config at {resolved}: {exc}.")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")

    try:
        config = from_dict(payload, default_config())
    except (TypeError, ValueError) as exc:
        return Err(f"Invalid value in config at {resolved}: {exc}.")
    # The marker is a plain suffix on the canonical path.
    if "/" in config.collision_marker or os.sep in config.collision_marker:
        return Err(f"collisionMarker {config.collision_marker!r} in {resolved} must not contain a path separator.")
    return Ok(config)


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)


def load_exclusions(path: str, fs: FileSystem = DEFAULT_FS) -> Result[frozenset[str], str]:
    """Read a newline-delimited list of paths to leave alone.

    Blank lines and ``#`` comments are ignored; paths are made absolute so
    they compare equal to walked paths.
    """
    try:
        text = fs.read_text(fs.expanduser(path))
    except OSError as exc:
        return Err(f"Failed reading exclusions at {path}: {exc}.")

    paths: set[str] = set()
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        paths.add(fs.absolute(fs.expanduser(line)))
    return Ok(frozenset(paths))

"""Environment access for configuration and credential lookup.

Config loading and API key resolution read the process environment through an
``Environment`` object instead of ``os.environ`` so callers (and tests) can
supply isolated values.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol


class Environment(Protocol):
    def get(self, name: str) -> str | None: ...


class ProcessEnvironment:
    """Reads variables from the running process."""

    def get(self, name: str) -> str | None:
        return os.environ.get(name)


class MappingEnvironment:
    """Reads variables from a fixed mapping."""

    def __init__(self, values: Mapping[str, str] | None = None):
        self.values = dict(values or {})

    def get(self, name: str) -> str | None:
        return self.values.get(name)


def home_dir(env: Environment) -> Path | None:
    """Return the user's home directory, checking HOME then USERPROFILE."""
    for name in ("HOME", "USERPROFILE"):
        value = env.get(name)
        if value and value.strip():
            return Path(value)
    return None

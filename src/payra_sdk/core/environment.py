"""
Configuration store used by the Payra SDK.

Values come from three layers: the process environment (or any mapping given
as ``base``), an optional ``.env`` file that only fills in missing keys, and
explicit overrides that always win. The result is an immutable
:class:`PayraEnvironment` that the per-network resolvers read from.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, MutableMapping, Optional

from .errors import ConfigError

__all__ = ["PayraEnvironment", "build_environment", "load_env_file"]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_env_file(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return values
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read env file {path}: {exc}") from exc

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = _strip_quotes(value.strip())
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load ``PAYRA_*`` style settings from ``path`` into ``environ``.

    Keys that already exist in ``environ`` are left untouched. The merged
    mapping is returned.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _parse_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class PayraEnvironment:
    """
    A resolved, read-only view over the configuration store.
    """

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.variables.get(key)
        if value is None or not str(value).strip():
            return default
        return str(value).strip()

    def numbered(self, prefix: str, *, start: int = 1) -> List[str]:
        """
        Collect ``{prefix}1``, ``{prefix}2``, ... until the first gap.
        """
        return list(self._iter_numbered(prefix, start))

    def _iter_numbered(self, prefix: str, index: int) -> Iterator[str]:
        while True:
            value = self.get(f"{prefix}{index}")
            if value is None:
                return
            yield value
            index += 1


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> PayraEnvironment:
    """
    Assemble a :class:`PayraEnvironment` from multiple sources.

    ``base`` defaults to :data:`os.environ`; pass ``env_file=None`` to skip the
    ``.env`` lookup entirely. ``overrides`` always win.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in _parse_env_file(Path(env_file)).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return PayraEnvironment(variables=merged)

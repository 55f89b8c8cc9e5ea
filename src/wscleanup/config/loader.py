# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete configuration sources (TOML file, pyproject) for cleanup steps."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol, runtime_checkable

from pydantic import ValidationError

from ..errors import ConfigError
from .models import CleanupStep

DEFAULT_INCLUDE_KEY: Final[str] = "include"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "ws-cleanup"
DEFAULT_CONFIG_FILENAME: Final[str] = "ws-cleanup.toml"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


@runtime_checkable
class ConfigSource(Protocol):
    """Source of a raw configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the raw mapping provided by this source."""

        raise NotImplementedError

    def describe(self) -> str:
        """Return a human-readable description of the source."""

        raise NotImplementedError


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested tables key by key.

    Args:
        base: Settings loaded earlier.
        override: Settings taking precedence.

    Returns:
        dict[str, Any]: New mapping; neither input is modified.
    """

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ``${VAR}`` references in strings nested anywhere in ``value``.

    Unknown variables are left as written.

    Args:
        value: Parsed TOML value.
        env: Environment used for lookups.

    Returns:
        Any: ``value`` with every string expanded.
    """

    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda match: env.get(match.group(1), match.group(0)), value)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(entry, env) for key, entry in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(entry, env) for entry in value]
    return value


class TomlConfigSource:
    """Load a cleanup step from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {include_chain}")
        try:
            with resolved.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Configuration at {path} is not valid TOML: {exc}") from exc
        document: dict[str, Any] = dict(data)
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            fragment = self._load(include_path, stack + (resolved,))
            merged = _deep_merge(merged, fragment)
        merged = _deep_merge(merged, document)
        return {key: _expand_env_value(value, self._env) for key, value in merged.items()}

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, str):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, list):
            return [self._resolve_path(Path(item), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read a cleanup step from ``[tool.ws-cleanup]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, MutableMapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, MutableMapping):
            return {}
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


def source_for_path(path: Path, *, env: Mapping[str, str] | None = None) -> ConfigSource:
    """Return the configuration source able to read ``path``.

    Args:
        path: Either a ``pyproject.toml`` or a standalone TOML step file.
        env: Environment used for ``${VAR}`` expansion.

    Returns:
        ConfigSource: Source reading ``path``.
    """

    if path.name == "pyproject.toml":
        return PyProjectConfigSource(path, env=env)
    return TomlConfigSource(path, env=env)


def load_step(
    sources: Sequence[ConfigSource],
    *,
    overrides: Mapping[str, Any] | None = None,
) -> CleanupStep:
    """Merge ``sources`` in order and validate the result as a :class:`CleanupStep`.

    Later sources win key by key; ``overrides`` are applied last.

    Args:
        sources: Ordered configuration sources.
        overrides: Optional raw values layered on top (e.g. from the CLI).

    Returns:
        CleanupStep: Validated step configuration.

    Raises:
        ConfigError: If a source cannot be parsed or the merged payload is invalid.
    """

    merged: dict[str, Any] = {}
    for source in sources:
        merged = _deep_merge(merged, source.load())
    if overrides:
        merged = _deep_merge(merged, overrides)
    try:
        return CleanupStep.model_validate(merged)
    except ValidationError as exc:
        described = ", ".join(source.describe() for source in sources) or "defaults"
        raise ConfigError(f"Invalid cleanup configuration ({described}): {exc}") from exc


def load_step_file(path: Path, *, env: Mapping[str, str] | None = None) -> CleanupStep:
    """Load and validate the cleanup step stored in ``path``.

    Raises:
        ConfigError: If ``path`` does not exist or holds invalid configuration.
    """

    if not path.is_file():
        raise ConfigError(f"Configuration file {path} does not exist")
    return load_step([source_for_path(path, env=env)])


__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "ConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_step",
    "load_step_file",
    "source_for_path",
]

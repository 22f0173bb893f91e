"""Compiler configuration for pwshc.

Settings come from, in increasing priority: the dataclass defaults, a
``pwshc.toml`` file (or the ``[tool.pwshc]`` table of ``pyproject.toml``)
found next to the source page or one of its parents, and ``PWSHC_*``
environment variables.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pwshc.errors import PwshcConfigError

__all__ = [
    "CompilerConfig",
    "load_compiler_config",
    "locate_config_file",
    "config_from_mapping",
]


@dataclass(frozen=True)
class CompilerConfig:
    """Settings that shape the extracted blocks and the generated C# file."""

    script_type: str = "pwsh"
    namespace: str = "PsWasmApp"
    class_name: str = "CompiledPowerShell"
    source_label: str = "index.html"
    service_domain: str = "documents.azure.com"
    secret_reference: str = "BuildSecrets.CosmosKey"
    # Stands in for the build secret when a plan runs in-process.
    fallback_secret_env: str = "PWSHC_BUILD_SECRET"
    no_output_message: str = "No output generated."
    newline: str = "\n"
    request_timeout: Optional[float] = None

    def endpoint_for(self, account_name: str) -> str:
        return f"https://{account_name}.{self.service_domain}:443/"


_ENV_OVERRIDES = {
    "PWSHC_NAMESPACE": "namespace",
    "PWSHC_CLASS_NAME": "class_name",
}


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise PwshcConfigError(f"Invalid TOML: {exc}", path=str(path)) from exc


def locate_config_file(start: Path) -> Optional[Path]:
    """Walk upward from ``start`` looking for ``pwshc.toml`` or a
    ``pyproject.toml`` that carries a ``[tool.pwshc]`` table."""
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        dedicated = candidate_dir / "pwshc.toml"
        if dedicated.exists():
            return dedicated
        pyproject = candidate_dir / "pyproject.toml"
        if pyproject.exists() and "pwshc" in _read_toml(pyproject).get("tool", {}):
            return pyproject
    return None


def config_from_mapping(data: Mapping[str, Any], *, path: Optional[str] = None) -> CompilerConfig:
    """Build a :class:`CompilerConfig` from a parsed TOML table."""
    known = {item.name: item for item in fields(CompilerConfig)}
    values: Dict[str, Any] = {}
    for key, raw in data.items():
        name = key.replace("-", "_")
        if name not in known:
            raise PwshcConfigError(
                f"Unknown configuration key '{key}'",
                path=path,
                hint=f"Valid keys: {', '.join(sorted(known))}",
            )
        if name == "request_timeout":
            if not isinstance(raw, (int, float)) or isinstance(raw, bool):
                raise PwshcConfigError("'request_timeout' must be a number of seconds", path=path)
            values[name] = float(raw)
            continue
        if not isinstance(raw, str):
            raise PwshcConfigError(f"'{key}' must be a string", path=path)
        values[name] = raw
    return CompilerConfig(**values)


def load_compiler_config(
    path: Optional[Path] = None,
    *,
    start: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CompilerConfig:
    """
    Resolve the effective configuration.

    ``path`` names a config file explicitly; otherwise one is searched for
    upward from ``start`` (defaults to the working directory).  An
    explicit path that does not exist is an error, a missing discovered
    file is not.
    """
    environ = os.environ if environ is None else environ
    if path is not None:
        if not path.exists():
            raise PwshcConfigError("Configuration file not found", path=str(path))
        config_path: Optional[Path] = path
    else:
        config_path = locate_config_file(start or Path.cwd())

    config = CompilerConfig()
    if config_path is not None:
        data = _read_toml(config_path)
        if config_path.name == "pyproject.toml":
            data = data.get("tool", {}).get("pwshc", {})
        config = config_from_mapping(data, path=str(config_path))

    overrides = {
        attr: environ[name]
        for name, attr in _ENV_OVERRIDES.items()
        if environ.get(name)
    }
    if overrides:
        config = replace(config, **overrides)
    return config

"""
pwshc – build-time PowerShell-to-C# compiler.

This package reads the inline PowerShell blocks of an HTML page
(``<script type="pwsh">`` elements) and compiles the commands it
understands into a single C# source file that a Blazor/WASM host can
call at run time.  Only two commands are compiled: ``Write-Output`` and
``Read-AzCosmosItems``.  The latter turns into a call to a Cosmos DB
REST helper that signs its requests with the account master key.

The code is organised into several modules:

* ``extract`` – finds the script blocks in the HTML page.
* ``parser`` – a restricted PowerShell parser producing the ``ast``
  dataclasses plus a list of diagnostics.
* ``compiler`` – resolves values and parameters and turns each block
  into the intermediate representation defined in ``ir``.
* ``codegen`` – pretty-prints the intermediate representation as C#.
* ``protocol`` – the Cosmos DB master-key REST protocol, shared by the
  emitted C# helpers and the Python ``runtime``.
* ``cli`` – the ``pwshc SOURCE OUTPUT`` entry point.
"""

import re
from pathlib import Path
from importlib import metadata as _metadata


def _local_version() -> str | None:
    root = Path(__file__).resolve().parents[1]
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return None
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:  # pragma: no cover - IO errors should not break imports
        return None
    match = re.search(r"^version\s*=\s*\"([^\"]+)\"", text, flags=re.MULTILINE)
    if match:
        return match.group(1)
    return None


try:  # pragma: no cover - metadata fallback for editable installs
    __version__ = _metadata.version("pwshc")
except _metadata.PackageNotFoundError:  # pragma: no cover - source tree
    __version__ = _local_version() or "0.1.0"

__all__ = ["__version__"]

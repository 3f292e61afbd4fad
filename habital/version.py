"""Application version.

Prefers the installed distribution metadata and falls back to reading
pyproject.toml with tomllib when running from a source checkout.
"""

import tomllib
from importlib import metadata
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DIST_NAME = "habital"


def get_version() -> str:
    """Return the habital version string."""
    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        pass
    with open(_PROJECT_ROOT / "pyproject.toml", "rb") as f:
        data = tomllib.load(f)
    return data["project"]["version"]


__version__: str = get_version()

"""Manifest lookup for discovered packages.

The manifest of a reference is the file whose change should invalidate
cached results for it: the installed package's own ``package.json`` when
one can be found in an enclosing ``node_modules``, otherwise the nearest
project ``package.json``.
"""

import logging
from pathlib import Path
from typing import Optional

from importcost.models import PackageReference

logger = logging.getLogger("importcost.parsers.manifest")

MANIFEST_NAME = "package.json"


def package_root(name: str) -> str:
    """Strip a deep-import subpath from a specifier.

    ``@scope/pkg/sub`` becomes ``@scope/pkg`` and ``pkg/sub`` becomes ``pkg``.
    """
    parts = name.split("/")
    if name.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def find_installed(reference: PackageReference) -> Optional[Path]:
    """Return the installed package directory of ``reference``, if any.

    Enclosing ``node_modules`` directories are searched from the importing
    file upwards; the first one holding the package manifest wins.
    """
    start = Path(reference.file_name).parent
    root = package_root(reference.name)
    if not root:
        return None
    for directory in (start, *start.parents):
        installed = directory / "node_modules" / root
        if (installed / MANIFEST_NAME).is_file():
            return installed
    return None


def locate_manifest(reference: PackageReference) -> Optional[Path]:
    """Return the manifest path to watch for ``reference``, if any."""
    installed = find_installed(reference)
    if installed is not None:
        return installed / MANIFEST_NAME
    start = Path(reference.file_name).parent
    nearest = next(
        (d / MANIFEST_NAME for d in (start, *start.parents) if (d / MANIFEST_NAME).is_file()),
        None,
    )
    if nearest is None:
        logger.debug("No manifest found for %s from %s", reference.name, start)
    return nearest


__all__ = ["MANIFEST_NAME", "find_installed", "locate_manifest", "package_root"]

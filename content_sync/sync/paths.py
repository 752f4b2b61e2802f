"""
Path helpers shared by the synchronization components.
"""

import os
from pathlib import Path, PurePath
from typing import Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

PathLike = Union[str, PurePath]


def posixify(path: PathLike) -> str:
    """Join path segments with forward slashes regardless of platform"""
    return "/".join(str(path).split(os.sep))


def posix_relative(start: PathLike, target: PathLike) -> str:
    """Relative path from ``start`` to ``target`` with forward slashes"""
    return posixify(os.path.relpath(str(target), str(start)))


def escapes_upward(relative: str) -> bool:
    """True if a relative path leaves its start directory"""
    return relative == ".." or relative.startswith("../") or os.path.isabs(relative)


def file_url_to_path(url: str) -> Path:
    """Convert a ``file://`` URL to a filesystem path"""
    parsed = urlparse(url)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URL: {url}")
    return Path(url2pathname(unquote(parsed.path)))


def normalize_module_key(key: PathLike, project_root: Path, source_root: Path) -> Path:
    """
    Turn a module-source key into an absolute path.

    String keys starting with ``.`` are relative to the source directory
    (glob results are resolved from there); other string keys are
    root-relative, a leading separator meaning the project root. ``Path``
    keys are kept when absolute and joined to the project root otherwise.
    """
    if isinstance(key, PurePath):
        path = Path(key)
        if not path.is_absolute():
            path = project_root / path
    elif key.startswith("."):
        path = source_root / key
    else:
        path = project_root / key.lstrip("/\\")

    return Path(os.path.normpath(str(path)))

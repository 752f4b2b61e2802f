"""
Entry Identifier Generation.

Derives the logical, store-facing id of an entry from its path relative to
the base directory and its declared metadata.
"""

import posixpath
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from slugify import slugify

from ..models.entries import GenerateIdOptions

GenerateId = Callable[[GenerateIdOptions], str]

_TRAILING_INDEX = re.compile(r"/index$")


def slugify_segment(segment: str) -> str:
    """Lowercase, ASCII-transliterated, hyphen-separated form of one segment"""
    return slugify(segment, lowercase=True)


def generate_id_default(options: GenerateIdOptions) -> str:
    """
    Default id strategy.

    An explicit ``slug`` in the metadata wins. Otherwise the file extension
    is stripped, every path segment is slugified on its own, and a trailing
    ``/index`` segment is dropped so index files take their directory's id.

    Example:
        ``posts/My First Post.astro`` -> ``posts/my-first-post``
    """
    meta = options.meta
    if meta and meta.get("slug"):
        return str(meta["slug"])

    without_ext, _ = posixpath.splitext(options.entry)
    segments = without_ext.split("/")
    slug = "/".join(slugify_segment(segment) for segment in segments)
    return _TRAILING_INDEX.sub("", slug)


class IdentifierGenerator:
    """
    Wraps the id strategy used by the sync engine.

    Uniqueness is the caller's responsibility: colliding ids are not
    detected and a later write simply replaces the earlier record.
    """

    def __init__(self, generate_id: Optional[GenerateId] = None):
        self._generate_id = generate_id or generate_id_default

    @property
    def is_default(self) -> bool:
        return self._generate_id is generate_id_default

    def generate(
        self,
        entry: str,
        base: Union[str, Path],
        meta: Optional[Dict[str, Any]] = None
    ) -> str:
        """Generate the logical id for an entry path"""
        options = GenerateIdOptions(entry=entry, base=Path(base), meta=meta)
        entry_id = self._generate_id(options)

        if not isinstance(entry_id, str) or not entry_id:
            raise ValueError(f"Identifier generator returned an invalid id for {entry}: {entry_id!r}")

        return entry_id

    def __call__(self, entry: str, base: Union[str, Path], meta: Optional[Dict[str, Any]] = None) -> str:
        return self.generate(entry, base, meta)

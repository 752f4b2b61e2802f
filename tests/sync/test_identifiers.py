"""
Tests for entry identifier generation.

Validates the default slug rules, explicit slugs from metadata, and custom
generator overrides.
"""

from pathlib import Path

import pytest

from content_sync.models.entries import GenerateIdOptions
from content_sync.sync.identifiers import (
    IdentifierGenerator,
    generate_id_default,
    slugify_segment,
)

BASE = Path("/project/src/content")


def _options(entry: str, meta=None) -> GenerateIdOptions:
    return GenerateIdOptions(entry=entry, base=BASE, meta=meta)


class TestDefaultIdGeneration:
    """Default strategy: per-segment slugs, extension and index stripped"""

    def test_slugifies_each_segment(self):
        assert generate_id_default(_options("posts/My First Post.astro")) == "posts/my-first-post"

    def test_index_takes_directory_id(self):
        assert generate_id_default(_options("posts/index.astro")) == "posts"

    def test_nested_index(self):
        assert generate_id_default(_options("docs/Getting Started/index.md")) == "docs/getting-started"

    def test_top_level_index_kept(self):
        """Only a trailing '/index' segment is dropped"""
        assert generate_id_default(_options("index.md")) == "index"

    def test_only_last_extension_stripped(self):
        assert generate_id_default(_options("notes/archive.tar.gz")) == "notes/archive-tar"

    def test_meta_slug_wins(self):
        options = _options("posts/My First Post.astro", meta={"slug": "custom"})

        assert generate_id_default(options) == "custom"

    def test_empty_meta_slug_ignored(self):
        options = _options("posts/hello.md", meta={"slug": ""})

        assert generate_id_default(options) == "posts/hello"

    def test_deterministic(self):
        ids = {generate_id_default(_options("a/B c.md")) for _ in range(5)}
        assert ids == {"a/b-c"}

    def test_slugify_segment_transliterates(self):
        assert slugify_segment("Crème Brûlée") == "creme-brulee"


class TestIdentifierGenerator:
    """Wrapper used by the sync engine"""

    def test_defaults_to_path_slugs(self):
        generator = IdentifierGenerator()

        assert generator.is_default
        assert generator.generate("posts/Hello World.md", BASE) == "posts/hello-world"

    def test_custom_generator_receives_options(self):
        seen = []

        def by_title(options: GenerateIdOptions) -> str:
            seen.append(options)
            return options.meta["title"].lower()

        generator = IdentifierGenerator(by_title)
        entry_id = generator("posts/a.md", BASE, {"title": "Hello"})

        assert entry_id == "hello"
        assert not generator.is_default
        assert seen[0].entry == "posts/a.md"
        assert seen[0].base == BASE

    def test_invalid_id_rejected(self):
        generator = IdentifierGenerator(lambda options: "")

        with pytest.raises(ValueError):
            generator.generate("posts/a.md", BASE)

"""
Tests for module providers and module-source normalization.
"""

import types
from pathlib import Path

import pytest

from content_sync.models.entries import ContentModule
from content_sync.sync.errors import ModuleLoadError
from content_sync.sync.paths import normalize_module_key
from content_sync.sync.providers import (
    EagerModuleProvider,
    LazyModuleProvider,
    module_provider_from_mapping,
)

ROOT = Path("/project")
SOURCE = ROOT / "src"


class TestModuleKeyNormalization:

    def test_dot_relative_keys_resolve_from_source_dir(self):
        assert normalize_module_key("./content/a.md", ROOT, SOURCE) == Path("/project/src/content/a.md")

    def test_parent_relative_keys(self):
        assert normalize_module_key("../docs/a.md", ROOT, SOURCE) == Path("/project/docs/a.md")

    def test_leading_slash_is_project_root(self):
        assert normalize_module_key("/src/content/a.md", ROOT, SOURCE) == Path("/project/src/content/a.md")

    def test_plain_string_is_root_relative(self):
        assert normalize_module_key("content/a.md", ROOT, SOURCE) == Path("/project/content/a.md")

    def test_absolute_path_objects_kept(self):
        assert normalize_module_key(Path("/elsewhere/a.md"), ROOT, SOURCE) == Path("/elsewhere/a.md")


class TestEagerModuleProvider:

    @pytest.mark.asyncio
    async def test_load_mapping_module(self):
        provider = EagerModuleProvider({
            Path("/c/a.md"): {"meta": {"title": "A"}, "body": "<p>A</p>"}
        })

        module = await provider.load(Path("/c/a.md"))

        assert isinstance(module, ContentModule)
        assert module.meta == {"title": "A"}
        assert module.body == "<p>A</p>"

    @pytest.mark.asyncio
    async def test_load_python_module(self):
        """Objects exposing meta/default attributes are accepted"""
        loaded = types.ModuleType("post")
        loaded.meta = {"title": "Post"}
        loaded.default = "body"
        provider = EagerModuleProvider({Path("/c/post.py"): loaded})

        module = await provider.load(Path("/c/post.py"))

        assert module.meta == {"title": "Post"}
        assert module.body == "body"

    @pytest.mark.asyncio
    async def test_untracked_path(self):
        provider = EagerModuleProvider({Path("/c/a.md"): {}})

        with pytest.raises(ModuleLoadError) as exc_info:
            await provider.load(Path("/c/missing.md"))

        assert exc_info.value.stage == "load"

    @pytest.mark.asyncio
    async def test_invalid_meta(self):
        provider = EagerModuleProvider({Path("/c/a.md"): {"meta": ["not", "a", "mapping"]}})

        with pytest.raises(ModuleLoadError):
            await provider.load(Path("/c/a.md"))


class TestLazyModuleProvider:

    @pytest.mark.asyncio
    async def test_loader_called_on_every_load(self):
        calls = []

        def load():
            calls.append(1)
            return {"meta": {"n": len(calls)}}

        provider = LazyModuleProvider({Path("/c/a.md"): load})

        first = await provider.load(Path("/c/a.md"))
        second = await provider.load(Path("/c/a.md"))

        assert first.meta == {"n": 1}
        assert second.meta == {"n": 2}

    @pytest.mark.asyncio
    async def test_async_loader(self):
        async def load():
            return ContentModule(meta={"title": "async"}, body="x")

        provider = LazyModuleProvider({Path("/c/a.md"): load})

        module = await provider.load(Path("/c/a.md"))

        assert module.meta == {"title": "async"}

    @pytest.mark.asyncio
    async def test_loader_failure_wrapped(self):
        def load():
            raise SyntaxError("unexpected token")

        provider = LazyModuleProvider({Path("/c/a.md"): load})

        with pytest.raises(ModuleLoadError) as exc_info:
            await provider.load(Path("/c/a.md"))

        assert "unexpected token" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, SyntaxError)


class TestModuleProviderFromMapping:

    def test_all_callables_is_lazy(self):
        provider = module_provider_from_mapping({"./a.md": lambda: {}, "./b.md": lambda: {}}, ROOT)

        assert isinstance(provider, LazyModuleProvider)
        assert sorted(provider.paths) == [SOURCE / "a.md", SOURCE / "b.md"]

    def test_no_callables_is_eager(self):
        provider = module_provider_from_mapping({"./a.md": {"meta": {}}}, ROOT)

        assert isinstance(provider, EagerModuleProvider)
        assert len(provider) == 1

    @pytest.mark.asyncio
    async def test_mixed_values_served_lazily(self):
        provider = module_provider_from_mapping(
            {"./a.md": lambda: {"meta": {"k": "lazy"}}, "./b.md": {"meta": {"k": "eager"}}},
            ROOT
        )

        assert isinstance(provider, LazyModuleProvider)
        assert (await provider.load(SOURCE / "b.md")).meta == {"k": "eager"}

    def test_custom_source_root(self):
        provider = module_provider_from_mapping({"./a.md": {}}, ROOT, ROOT / "site")

        assert provider.paths == [ROOT / "site" / "a.md"]

    def test_existing_provider_passed_through(self):
        provider = EagerModuleProvider({})

        assert module_provider_from_mapping(provider, ROOT) is provider

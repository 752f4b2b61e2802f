"""
Module Providers.

A module provider turns a tracked path into a materialized ContentModule.
Two variants exist: eager (modules already loaded) and lazy (a loader
function per path, re-invoked on every load so edits are observed).
"""

import inspect
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from ..models.entries import ContentModule
from .errors import ModuleLoadError
from .paths import PathLike, normalize_module_key

logger = logging.getLogger(__name__)

ModuleLoaderFn = Callable[[], Union[Any, Awaitable[Any]]]


class ModuleProvider(ABC):
    """Uniform access to the tracked module set"""

    @property
    @abstractmethod
    def paths(self) -> List[Path]:
        """Absolute paths of every tracked module"""

    @abstractmethod
    async def _load_raw(self, path: Path) -> Any:
        """Produce the raw loaded object for ``path``"""

    async def load(self, path: Path) -> ContentModule:
        """
        Load the module at ``path`` in materialized form.

        Raises:
            ModuleLoadError: If the path is untracked or loading fails
        """
        path = Path(path)
        if path not in self:
            raise ModuleLoadError(path, "Path is not a tracked module")

        try:
            raw = await self._load_raw(path)
            return ContentModule.coerce(raw)
        except ModuleLoadError:
            raise
        except Exception as e:
            raise ModuleLoadError(path, f"Failed to load module: {e}") from e

    def __contains__(self, path: object) -> bool:
        return path in set(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


class EagerModuleProvider(ModuleProvider):
    """Provider over modules that were loaded up front"""

    def __init__(self, modules: Mapping[Path, Any]):
        self._modules: Dict[Path, Any] = {Path(p): m for p, m in modules.items()}

    @property
    def paths(self) -> List[Path]:
        return list(self._modules)

    def __contains__(self, path: object) -> bool:
        return path in self._modules

    async def _load_raw(self, path: Path) -> Any:
        return self._modules[path]


class LazyModuleProvider(ModuleProvider):
    """Provider over loader functions, which may be sync or async"""

    def __init__(self, loaders: Mapping[Path, ModuleLoaderFn]):
        self._loaders: Dict[Path, ModuleLoaderFn] = {Path(p): fn for p, fn in loaders.items()}

    @property
    def paths(self) -> List[Path]:
        return list(self._loaders)

    def __contains__(self, path: object) -> bool:
        return path in self._loaders

    async def _load_raw(self, path: Path) -> Any:
        result = self._loaders[path]()
        if inspect.isawaitable(result):
            result = await result
        return result


def _is_loader(value: Any) -> bool:
    # Classes and Python modules are values, not loader functions
    return callable(value) and not inspect.isclass(value) and not isinstance(value, ContentModule)


def _constant_loader(value: Any) -> ModuleLoaderFn:
    def load() -> Any:
        return value
    return load


def module_provider_from_mapping(
    modules: Mapping[PathLike, Any],
    project_root: Path,
    source_root: Optional[Path] = None
) -> ModuleProvider:
    """
    Build a provider from a module-source mapping.

    Keys are normalized to absolute paths (see ``normalize_module_key``).
    All-callable values give a lazy provider, no callables an eager one; a
    mix is served lazily with the loaded values returned as they are.
    """
    if isinstance(modules, ModuleProvider):
        return modules

    project_root = Path(project_root)
    source_root = Path(source_root) if source_root else project_root / "src"

    normalized: Dict[Path, Any] = {}
    for key, value in modules.items():
        path = normalize_module_key(key, project_root, source_root)
        if path in normalized:
            logger.warning(f"Module key {key!r} resolves to an already tracked path {path}")
        normalized[path] = value

    loader_flags = [_is_loader(v) for v in normalized.values()]
    if loader_flags and all(loader_flags):
        return LazyModuleProvider(normalized)
    if not any(loader_flags):
        return EagerModuleProvider(normalized)

    logger.debug("Module source mixes loaders and loaded modules; serving lazily")
    return LazyModuleProvider({
        path: value if _is_loader(value) else _constant_loader(value)
        for path, value in normalized.items()
    })

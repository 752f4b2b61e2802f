"""
Content Loader.

Startup orchestration: normalize the module source, resolve the base
directory, run the bulk synchronization pass and, once it has completed,
attach the watcher.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .models.config import LoaderSettings
from .models.results import SyncReport
from .sync.base_dir import BaseDirectoryResolver
from .sync.collaborators import Digester, Renderer, Validator
from .sync.engine import SyncEngine
from .sync.errors import ConsistencyWarning
from .sync.identifiers import GenerateId
from .sync.paths import PathLike
from .sync.providers import ModuleProvider, module_provider_from_mapping
from .sync.router import WatchEventRouter
from .sync.watcher import ContentWatcher

logger = logging.getLogger(__name__)


class ContentLoader:
    """
    Loads structured modules as content entries into a store.

    Modules may declare a ``meta`` mapping (frontmatter-like data) and a
    renderable ``body``. Ids default to slugified entry paths.

    Example:
        loader = ContentLoader({"./content/posts/hello.md": load_hello})
        report = await loader.load(store)
    """

    name = "content-loader"

    def __init__(
        self,
        modules: Union[Mapping[PathLike, Any], ModuleProvider],
        base: Optional[Union[str, Path]] = None,
        generate_id: Optional[GenerateId] = None,
        settings: Optional[LoaderSettings] = None
    ):
        """
        Args:
            modules: Module source; keys are path-like, values are loaded
                modules or loader functions
            base: Base directory for entry ids (project-root-relative,
                absolute, or a ``file://`` URL); inferred when omitted
            generate_id: Id strategy override
            settings: Loader settings (environment defaults when omitted)
        """
        self.settings = settings or LoaderSettings()
        self.base = base if base is not None else self.settings.base
        self.generate_id = generate_id
        self.provider = module_provider_from_mapping(
            modules,
            self.settings.project_root,
            self.settings.source_root
        )

        self.engine: Optional[SyncEngine] = None
        self.router: Optional[WatchEventRouter] = None
        self.watcher: Optional[ContentWatcher] = None
        self.base_dir: Optional[Path] = None

    async def load(
        self,
        store: Any,
        watcher: Optional[ContentWatcher] = None,
        digester: Optional[Digester] = None,
        validator: Optional[Validator] = None,
        renderer: Optional[Renderer] = None
    ) -> SyncReport:
        """
        Synchronize every tracked module into ``store``.

        Returns after the bulk pass has completed; only then is the watcher
        (if any) pointed at the base directory and started.

        Raises:
            ConfigurationError: If the base directory cannot be resolved; no
                file is processed in that case
        """
        project_root = self.settings.project_root

        if len(self.provider) == 0:
            warning = ConsistencyWarning(
                f"No tracked files matched the module source under {project_root}"
            )
            logger.warning(str(warning))
            report = SyncReport()
            report.warnings.append(warning)
            report.complete()
            return report

        resolver = BaseDirectoryResolver(project_root)
        self.base_dir = resolver.resolve(self.provider.paths, self.base)
        logger.info(f"Loading {len(self.provider)} entries from {self.base_dir}")

        self.engine = SyncEngine(
            provider=self.provider,
            store=store,
            base_dir=self.base_dir,
            project_root=project_root,
            generate_id=self.generate_id,
            digester=digester,
            validator=validator,
            renderer=renderer,
            max_concurrency=self.settings.max_concurrency
        )

        report = await self.engine.bulk_sync()

        if watcher is not None:
            await self.watch(watcher)

        return report

    async def watch(self, watcher: ContentWatcher) -> WatchEventRouter:
        """Attach ``watcher`` to the base directory and route its events"""
        if self.engine is None or not self.engine.ready.is_set():
            raise RuntimeError("Cannot attach a watcher before the bulk synchronization has completed")
        if self.router is not None:
            raise RuntimeError("A watcher is already attached; close() the loader first")

        self.watcher = watcher
        self.router = WatchEventRouter(self.engine)
        watcher.add(self.base_dir)
        self.router.attach(watcher)

        if not watcher.is_running:
            await watcher.start()

        logger.info(f"Watching {self.base_dir} for changes")
        return self.router

    async def close(self) -> None:
        """Detach and stop the watcher"""
        if self.router is not None:
            self.router.detach()
            self.router = None
        if self.watcher is not None:
            await self.watcher.stop()
            self.watcher = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

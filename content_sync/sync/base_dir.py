"""
Base Directory Resolution.

Infers or validates the single directory that all entry paths are
expressed relative to.
"""

import logging
import os
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Sequence, Union

from .errors import ConfigurationError
from .paths import escapes_upward, file_url_to_path, posix_relative

logger = logging.getLogger(__name__)


class BaseDirectoryResolver:
    """
    Resolves the base directory for a set of tracked source files.

    An explicit base is resolved against the project root and used as given.
    Otherwise the base is inferred as the deepest directory shared by every
    tracked path, which needs at least two paths to be meaningful.
    """

    MIN_PATHS_FOR_INFERENCE = 2

    def __init__(self, project_root: Union[str, Path]):
        self.project_root = Path(project_root).resolve()

    def resolve(
        self,
        paths: Iterable[PurePath],
        base: Optional[Union[str, PurePath]] = None
    ) -> Path:
        """
        Produce the absolute base directory for ``paths``.

        Args:
            paths: Absolute source file paths
            base: Optional explicit base (project-root-relative path,
                absolute path or ``file://`` URL)

        Returns:
            Absolute base directory that exists on disk

        Raises:
            ConfigurationError: If the base is ambiguous, missing on disk, or
                does not contain every tracked path
        """
        paths = [Path(p) for p in paths]

        if base is not None:
            base_dir = self._resolve_explicit(base)
            logger.debug(f"Using explicit base directory {base_dir}")
        else:
            if len(paths) < self.MIN_PATHS_FOR_INFERENCE:
                raise ConfigurationError(
                    f"Cannot infer a base directory from {len(paths)} tracked "
                    f"file(s); at least {self.MIN_PATHS_FOR_INFERENCE} are required",
                    hint="Pass an explicit base directory relative to the project root"
                )
            base_dir = self.infer(paths)
            logger.debug(f"Inferred base directory {base_dir} from {len(paths)} paths")

        self.validate_exists(base_dir)
        self.ensure_descendants(base_dir, paths)
        return base_dir

    @staticmethod
    def infer(paths: Sequence[PurePath]) -> Path:
        """
        Deepest common directory of ``paths``, compared segment by segment.

        Raises:
            ConfigurationError: If the paths share no root at all
        """
        split_paths = [Path(p).parts for p in paths]
        if not split_paths:
            raise ConfigurationError("Cannot infer a base directory without any paths")

        base_parts: List[str] = []
        first = split_paths[0]
        for i, segment in enumerate(first):
            if all(len(parts) > i and parts[i] == segment for parts in split_paths):
                base_parts.append(segment)
            else:
                break

        # Identical paths would otherwise resolve to the file itself
        if len(base_parts) == len(first):
            base_parts = base_parts[:-1]

        if not base_parts:
            raise ConfigurationError(
                "Tracked files share no common directory",
                hint="Pass an explicit base directory"
            )

        inferred = Path(*base_parts)
        if not inferred.is_absolute():
            inferred = Path("/") / inferred
        return inferred

    def _resolve_explicit(self, base: Union[str, PurePath]) -> Path:
        if isinstance(base, str) and base.startswith("file://"):
            return file_url_to_path(base)
        # Normalized like tracked paths; symlinks are not followed
        return Path(os.path.normpath(str(self.project_root / Path(base))))

    def validate_exists(self, base_dir: Path) -> None:
        """
        Raise ConfigurationError if ``base_dir`` is missing on disk.

        When the path looks like a relative path that was accidentally made
        absolute, the error suggests the root-relative form that does exist.
        """
        if base_dir.is_dir():
            return

        hint = None
        candidate = self.corrected_candidate(base_dir)
        if candidate is not None:
            suggestion = posix_relative(self.project_root, candidate)
            hint = (
                f"'{base_dir}' is absolute; did you mean '{suggestion}' "
                f"(relative to the project root {self.project_root})?"
            )

        raise ConfigurationError(f"Base directory does not exist: {base_dir}", hint=hint)

    def corrected_candidate(self, base_dir: PurePath) -> Optional[Path]:
        """Root-relative reading of an absolute path, if that one exists"""
        text = str(base_dir)
        if not text.startswith(("/", "\\")):
            return None
        candidate = self.project_root / text.lstrip("/\\")
        if candidate != Path(base_dir) and candidate.is_dir():
            return candidate
        return None

    @staticmethod
    def ensure_descendants(base_dir: Path, paths: Iterable[PurePath]) -> None:
        """Raise ConfigurationError if any path lies outside ``base_dir``"""
        outside = [
            str(p) for p in paths
            if escapes_upward(posix_relative(base_dir, p))
        ]
        if outside:
            preview = ", ".join(outside[:3])
            more = f" and {len(outside) - 3} more" if len(outside) > 3 else ""
            raise ConfigurationError(
                f"{len(outside)} tracked file(s) are outside the base directory "
                f"{base_dir}: {preview}{more}",
                hint="Choose a base directory that contains every tracked file"
            )

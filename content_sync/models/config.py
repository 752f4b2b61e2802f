"""
Configuration models for content-sync.

Handles project-level loader settings with environment variable support.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderSettings(BaseSettings):
    """Settings for a content loader run"""
    model_config = SettingsConfigDict(
        env_prefix="CONTENT_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True
    )

    # Project layout
    project_root: Path = Field(default_factory=Path.cwd)
    source_dir: str = "src"
    base: Optional[str] = None

    # Persistence
    store_path: Path = Path(".content-sync") / "store.json"

    # Processing
    max_concurrency: int = Field(default=0, ge=0, le=1024)
    watch: bool = False

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator('project_root')
    @classmethod
    def validate_project_root(cls, v: Path) -> Path:
        """Always work with an absolute project root"""
        return Path(v).expanduser().resolve()

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def source_root(self) -> Path:
        """Directory that ``./``-relative module keys are resolved against"""
        return self.project_root / self.source_dir

    @property
    def resolved_store_path(self) -> Path:
        """Store file path, resolved against the project root"""
        if self.store_path.is_absolute():
            return self.store_path
        return self.project_root / self.store_path

    @property
    def config_dir(self) -> Path:
        return self.project_root / ".content-sync"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = self.model_dump(mode="json")
        # The root is implied by where the file lives
        data.pop('project_root', None)
        return data

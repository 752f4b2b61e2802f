"""
Content entry models for content-sync.

Defines the loaded module shape, the options handed to identifier
generators, and the record persisted in the content store.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentModule(BaseModel):
    """
    A source file loaded as a structured module.

    ``meta`` is the optional declared metadata (frontmatter-like mapping) and
    ``body`` is the opaque renderable part handed to the renderer.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    meta: Optional[Dict[str, Any]] = None
    body: Any = None

    @classmethod
    def coerce(cls, obj: Any) -> 'ContentModule':
        """
        Materialize any loaded object into a ContentModule.

        Accepts an existing ContentModule, a mapping with ``meta`` and
        ``body`` (or ``default``) keys, or any object exposing those names
        as attributes, Python modules included.
        """
        if isinstance(obj, ContentModule):
            return obj

        if isinstance(obj, Mapping):
            body = obj.get("body", obj.get("default"))
            return cls(meta=obj.get("meta"), body=body)

        body = getattr(obj, "body", None)
        if body is None:
            body = getattr(obj, "default", None)
        return cls(meta=getattr(obj, "meta", None), body=body)

    @field_validator('meta', mode='before')
    @classmethod
    def validate_meta(cls, v: Any) -> Optional[Dict[str, Any]]:
        """Copy mapping-like metadata into a plain dict"""
        if v is None:
            return None
        if not isinstance(v, Mapping):
            raise ValueError('Module metadata must be a mapping')
        return dict(v)


class GenerateIdOptions(BaseModel):
    """Inputs handed to an identifier generator"""

    # Path to the entry file, relative to the base directory
    entry: str
    # Absolute base directory
    base: Path
    # Parsed, unvalidated metadata of the entry
    meta: Optional[Dict[str, Any]] = None


class RenderedContent(BaseModel):
    """Serialized output of the renderer"""
    html: str = ""


class StoreRecord(BaseModel):
    """
    A processed entry as persisted by the content store.

    ``file_path`` is relative to the project root (not to the base
    directory) and always uses forward slashes.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)
    rendered: Optional[RenderedContent] = None
    file_path: Optional[str] = None
    digest: Optional[str] = None

    @field_validator('file_path')
    @classmethod
    def validate_file_path(cls, v: Optional[str]) -> Optional[str]:
        """Keep stored paths separator-normalized"""
        if v is None:
            return v
        return v.replace('\\', '/')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoreRecord':
        """Create from dictionary"""
        return cls.model_validate(data)

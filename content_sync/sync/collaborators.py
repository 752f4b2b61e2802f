"""
Collaborator contracts consumed by the sync engine, with thin defaults.

Digesting, schema validation and rendering are supplied by the caller. The
defaults here only adapt plain values so the engine runs out of the box.
Every method may return a plain value or an awaitable.
"""

import hashlib
import inspect
import json
from pathlib import Path
from typing import Any, Awaitable, Dict, Protocol, Type, TypeVar, Union, runtime_checkable

from pydantic import BaseModel, ValidationError

from ..models.entries import ContentModule
from .errors import EntryValidationError

T = TypeVar('T')
MaybeAwaitable = Union[T, Awaitable[T]]


async def maybe_await(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable"""
    if inspect.isawaitable(value):
        return await value
    return value


@runtime_checkable
class Digester(Protocol):
    """Opaque, stable fingerprint of a serialized module"""

    def digest(self, serialized: str) -> MaybeAwaitable[str]:
        ...


@runtime_checkable
class Validator(Protocol):
    """Schema validation step; returns the validated data or raises"""

    def validate(self, entry: Dict[str, Any]) -> MaybeAwaitable[Dict[str, Any]]:
        ...


@runtime_checkable
class Renderer(Protocol):
    """Turns a module body into its serialized output"""

    def render(self, body: Any) -> MaybeAwaitable[str]:
        ...


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if callable(value):
        module = getattr(value, "__module__", None) or ""
        name = getattr(value, "__qualname__", None) or type(value).__qualname__
        return f"<callable {module}.{name}>"
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


def serialize_module(module: ContentModule) -> str:
    """Stable JSON form of a module, used as digest input"""
    return json.dumps(
        {"meta": module.meta, "body": module.body},
        sort_keys=True,
        default=_json_default,
        ensure_ascii=False
    )


class Sha256Digester:
    """SHA-256 hex digest of the serialized module"""

    def digest(self, serialized: str) -> str:
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


class PassthroughValidator:
    """Accepts any data unchanged"""

    def validate(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return entry["data"]


class PydanticSchemaValidator:
    """
    Uses a pydantic model as the collection schema.

    Validation failures surface as EntryValidationError naming the entry.
    """

    def __init__(self, model: Type[BaseModel]):
        self.model = model

    def validate(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validated = self.model.model_validate(entry["data"])
        except ValidationError as e:
            raise EntryValidationError(
                entry.get("source_path", ""),
                f"Data does not match {self.model.__name__}: {e}",
                entry_id=entry.get("id")
            ) from e
        return validated.model_dump(mode="json")


class CallableRenderer:
    """
    Default renderer.

    A string body renders as itself, a callable body is called (and awaited
    if needed), anything else is stringified. A missing body renders empty.
    """

    async def render(self, body: Any) -> str:
        if body is None:
            return ""
        if isinstance(body, str):
            return body
        if callable(body):
            body = await maybe_await(body())
        return "" if body is None else str(body)

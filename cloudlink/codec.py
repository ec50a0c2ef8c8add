"""
Payload Codec.

Converts domain objects to and from the JSON payload carried by an
ObjectData envelope.

A decoder is either a callable taking the envelope, or a type descriptor
(a class or a parametrized generic such as list[int]) that the payload is
validated against with pydantic.

Plain strings are the one special case: they travel wrapped in a
{"v": <string>} object, in both directions. Other primitives are encoded
as plain JSON.
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar, Union, get_origin

from pydantic import BaseModel, TypeAdapter

from cloudlink.schemas.object_data import ObjectData

T = TypeVar("T")

Decoder = Union[Callable[[ObjectData], T], type[T]]


class StringObject(BaseModel):
    """Wire shape of a plain string payload."""

    v: str


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def is_type_descriptor(decoder: Any) -> bool:
    """Whether the decoder describes a type rather than a mapping function."""
    return decoder is Any or isinstance(decoder, type) or get_origin(decoder) is not None


def encode(target: Any) -> str:
    """
    Serialize a domain object into a payload string.

    Args:
        target: Object to serialize

    Returns:
        JSON text
    """
    if type(target) is str:
        return StringObject(v=target).model_dump_json()
    if isinstance(target, BaseModel):
        return target.model_dump_json()
    return _adapter(type(target)).dump_json(target).decode("utf-8")


def decode(envelope: ObjectData, decoder: Decoder[T]) -> T:
    """
    Turn an envelope into a domain object.

    Args:
        envelope: Envelope returned by CloudLink
        decoder: Mapping function or type descriptor

    Returns:
        The decoded object

    Raises:
        pydantic.ValidationError: If the payload does not match the type
        TypeError: If decoder is neither a type nor callable
    """
    if is_type_descriptor(decoder):
        return from_json(envelope.payload, decoder)
    if callable(decoder):
        return decoder(envelope)
    raise TypeError(f"decoder must be a type or a callable, got {type(decoder).__name__}")


def from_json(payload: str | None, type_: Any) -> Any:
    """Validate a payload string against a type descriptor."""
    text = payload if payload is not None else "null"
    if type_ is str:
        return StringObject.model_validate_json(text).v
    if isinstance(type_, type) and issubclass(type_, BaseModel):
        return type_.model_validate_json(text)
    return _adapter(type_).validate_json(text)

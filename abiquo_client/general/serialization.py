"""
abiquo_client.general.serialization - Response decoding and body encoding
==========================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Type, TypeVar, Union
import json

from pydantic import BaseModel, ValidationError

from abiquo_client.core.errors import DecodeError, PreconditionViolation

T = TypeVar("T")

# Ordered field-name -> value map for resources without a dedicated model.
DictionaryParameters = Dict[str, Any]

Decoder = Union[Type[T], Callable[[str], T]]


def _target_name(decoder: Any) -> str:
    return getattr(decoder, "__name__", type(decoder).__name__)


def decode(decoder: Decoder, text: str) -> Any:
    """
    Decode ``text`` with a pydantic model class or a decoding function.

    Raises
    ------
    DecodeError
        If the body is empty, does not match the requested shape, or the
        decoding function fails on it
    """
    if decoder is None:
        raise PreconditionViolation("decoder must not be None")
    target = _target_name(decoder)
    if not text or not text.strip():
        raise DecodeError(target, text, "empty response body")
    try:
        if isinstance(decoder, type) and issubclass(decoder, BaseModel):
            return decoder.model_validate_json(text)
        return decoder(text)
    except ValidationError as e:
        raise DecodeError(target, text, f"{e.error_count()} validation error(s): {e}") from e
    except ValueError as e:
        raise DecodeError(target, text, str(e)) from e
    except (KeyError, TypeError, AttributeError) as e:
        raise DecodeError(target, text, f"{type(e).__name__}: {e}") from e


def decode_dictionary(text: str) -> DictionaryParameters:
    """
    Decode a JSON object into an ordered ``DictionaryParameters`` map.

    Examples
    --------
    >>> decode_dictionary('{"id": 1, "name": "Abiquo"}')
    {'id': 1, 'name': 'Abiquo'}
    """
    if not text or not text.strip():
        raise DecodeError("DictionaryParameters", text, "empty response body")
    try:
        data = json.loads(text)
    except ValueError as e:
        raise DecodeError("DictionaryParameters", text, str(e)) from e
    if not isinstance(data, dict):
        raise DecodeError("DictionaryParameters", text, f"expected a JSON object, got {type(data).__name__}")
    return data


def encode(body: Union[str, BaseModel, None]) -> Union[str, None]:
    """Serialize a request body; strings are passed through unchanged."""
    if body is None or isinstance(body, str):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True, exclude_none=True)
    raise PreconditionViolation(f"Unsupported body type: {type(body).__name__}")

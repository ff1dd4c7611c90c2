# core/bridge/encoder.py
"""Serialization of bridge requests to the camelCase wire format"""

import json
import math
import logging
from dataclasses import fields
from typing import Any, Dict, Mapping, Optional, Union

from core.bridge.models import BridgeRequest, ImageSet, SliderOptions, SwitchOptions

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Request data from the UI cannot be turned into a BridgeRequest"""


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Value for a field under its snake_case or camelCase key"""
    if name in data:
        return data[name]
    return data.get(_camel_case(name))


def _section_to_wire(section) -> Optional[Dict[str, Any]]:
    if section is None:
        return None
    return {
        _camel_case(f.name): getattr(section, f.name)
        for f in fields(section)
        if getattr(section, f.name) is not None
    }


def _is_bool(value) -> bool:
    return isinstance(value, bool)


def _is_number(value) -> bool:
    # bool is an int subclass but not a slider value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_string_list(value) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


# Допустимые значения полей каждой секции
_FIELD_CHECKS = {
    SwitchOptions: (_is_bool, "a boolean"),
    SliderOptions: (_is_number, "a finite number"),
    ImageSet: (_is_string_list, "a list of strings"),
}


def _section_from_dict(cls, data: Any, section_name: str):
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise PayloadError(f"'{section_name}' must be an object, got {type(data).__name__}")

    check, expected = _FIELD_CHECKS[cls]
    values = {}
    for f in fields(cls):
        value = _lookup(data, f.name)
        if value is None:
            continue
        if not check(value):
            raise PayloadError(
                f"'{section_name}.{f.name}' must be {expected}, got {value!r}"
            )
        if isinstance(value, list):
            value = tuple(value)
        values[f.name] = value
    return cls(**values)


def request_from_dict(data: Mapping[str, Any]) -> BridgeRequest:
    """
    Build a BridgeRequest from the dictionary the UI sends.

    Args:
        data: Request object with camelCase or snake_case keys

    Returns:
        BridgeRequest: Immutable request

    Raises:
        PayloadError: If ``prompt`` is missing or a section is malformed
    """
    if not isinstance(data, Mapping):
        raise PayloadError(f"Request must be an object, got {type(data).__name__}")

    prompt = data.get('prompt')
    if prompt is None:
        raise PayloadError("'prompt' is required")
    if not isinstance(prompt, str):
        raise PayloadError(f"'prompt' must be a string, got {type(prompt).__name__}")

    return BridgeRequest(
        prompt=prompt,
        options=_section_from_dict(SwitchOptions, _lookup(data, 'options'), 'options'),
        sliders=_section_from_dict(SliderOptions, _lookup(data, 'sliders'), 'sliders'),
        images=_section_from_dict(ImageSet, _lookup(data, 'images'), 'images'),
    )


def to_wire_dict(request: BridgeRequest) -> Dict[str, Any]:
    """JSON object for the remote endpoint; unset fields are omitted, not null"""
    wire: Dict[str, Any] = {'prompt': request.prompt}

    for name in ('options', 'sliders', 'images'):
        section = _section_to_wire(getattr(request, name))
        if section is not None:
            wire[_camel_case(name)] = section

    return wire


def encode_payload(request: BridgeRequest) -> bytes:
    """
    Raises:
        PayloadError: A value has no standard JSON form (NaN, Infinity, unknown types)
    """
    try:
        body = json.dumps(to_wire_dict(request), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"Payload cannot be encoded as JSON: {e}") from e

    body = body.encode('utf-8')
    logger.debug(f"Encoded payload: {len(body)} bytes")
    return body


def decode_payload(data: Union[bytes, str]) -> BridgeRequest:
    """Parse a wire payload back into a BridgeRequest"""
    if isinstance(data, bytes):
        data = data.decode('utf-8')
    try:
        parsed = json.loads(data)
    except ValueError as e:
        raise PayloadError(f"Payload is not valid JSON: {e}") from e
    return request_from_dict(parsed)

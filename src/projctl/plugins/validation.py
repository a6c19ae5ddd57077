"""Validators built from a handler's ``validationProperties``.

Each validation property is a mapping::

    {"source": "Git:CloneLocation|Location", "match": "^/git/"}

``source`` is a ``:``-separated path into the item's JSON form. ``|``
separates alternatives, any of which may satisfy the property. A leading
``!`` inverts a path: it holds only when the path is absent. ``match``
decides what a present value must look like:

- absent: any value other than ``None``
- ``bool`` / number: equality
- string: regular-expression search against the value's string form

An item validates when every property holds.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Validator:
    """Predicate over workspace items."""

    validation_function: Callable[[Any], bool]


def make_validator(
    handler_info: Mapping[str, Any] | Any,
    registry: Any = None,
    excluded_ids: Iterable[str] = (),
) -> Validator:
    """Build a :class:`Validator` for a handler's declared properties.

    *handler_info* is either a property mapping (a service reference's
    properties) or an object exposing ``validation_properties`` and ``id``.
    *registry* is accepted for parity with handler lookups and is unused by
    the built-in property matching. Handlers whose ``id`` appears in
    *excluded_ids* never validate.
    """
    properties, handler_id = _describe(handler_info)
    excluded = set(excluded_ids)

    if handler_id is not None and handler_id in excluded:
        return Validator(validation_function=lambda _item: False)

    rules = [_compile_rule(prop) for prop in properties]

    def validation_function(item: Any) -> bool:
        data = _as_json(item)
        if data is None:
            return False
        return all(rule(data) for rule in rules)

    return Validator(validation_function=validation_function)


def _describe(handler_info: Mapping[str, Any] | Any) -> tuple[list[Mapping[str, Any]], str | None]:
    if isinstance(handler_info, Mapping):
        props = handler_info.get("validationProperties")
        handler_id = handler_info.get("id")
    else:
        props = getattr(handler_info, "validation_properties", None)
        handler_id = getattr(handler_info, "id", None)
    return list(props or []), handler_id


def _compile_rule(prop: Mapping[str, Any]) -> Callable[[Mapping[str, Any]], bool]:
    source = prop.get("source")
    if not source or not isinstance(source, str):
        logger.warning("Ignoring validation property without a source: %r", prop)
        return lambda _data: True

    has_match = "match" in prop
    match = prop.get("match")
    pattern = None
    if isinstance(match, str):
        try:
            pattern = re.compile(match)
        except re.error:
            logger.warning("Ignoring validation property with invalid pattern: %r", prop)
            return lambda _data: False
    alternatives = [alt.strip() for alt in source.split("|") if alt.strip()]

    def check(data: Mapping[str, Any]) -> bool:
        for alternative in alternatives:
            negated = alternative.startswith("!")
            path = alternative[1:] if negated else alternative
            value = _lookup(data, path.split(":"))
            if negated:
                if value is _MISSING or value is None:
                    return True
                continue
            if value is _MISSING or value is None:
                continue
            if not has_match:
                return True
            if pattern is not None:
                if pattern.search(str(value)):
                    return True
            elif value == match:
                return True
        return False

    return check


def _lookup(data: Any, path: list[str]) -> Any:
    current = data
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _as_json(item: Any) -> Mapping[str, Any] | None:
    if isinstance(item, BaseModel):
        return item.model_dump(by_alias=True, mode="json")
    if isinstance(item, Mapping):
        return item
    return None

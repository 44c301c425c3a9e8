"""Compiled schema representation."""

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Pattern, Tuple, Union


class AdditionalMode(enum.Enum):
    """How keys not covered by ``properties`` are treated."""
    ALLOWED = 'allowed'
    FORBIDDEN = 'forbidden'


@dataclass(frozen=True)
class PatternProperty:
    """A ``patternProperties`` entry with its regex compiled once."""
    pattern: str
    regex: Pattern
    schema: 'SchemaNode'

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None


@dataclass(frozen=True)
class SchemaNode:
    """One compiled schema or sub-schema.

    Every constraint is optional. Combinator lists are ``None`` when the keyword
    is absent and a (possibly empty) tuple when it was given. ``boolean`` holds
    the value of a ``true``/``false`` schema, which carries no other constraint.
    """
    # pylint: disable=too-many-instance-attributes
    types: FrozenSet[str] = frozenset()
    boolean: Optional[bool] = None

    # objects
    properties: Dict[str, 'SchemaNode'] = field(default_factory=dict)
    pattern_properties: Tuple[PatternProperty, ...] = ()
    additional_properties: Union[AdditionalMode, 'SchemaNode'] = AdditionalMode.ALLOWED
    required: Tuple[str, ...] = ()
    min_properties: Optional[int] = None
    max_properties: Optional[int] = None
    dependencies: Dict[str, Union[Tuple[str, ...], 'SchemaNode']] = field(default_factory=dict)
    property_names: Optional['SchemaNode'] = None

    # arrays
    items: Union[None, 'SchemaNode', Tuple['SchemaNode', ...]] = None
    additional_items: Union[AdditionalMode, 'SchemaNode'] = AdditionalMode.ALLOWED
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False
    contains: Optional['SchemaNode'] = None

    # strings
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    pattern_regex: Optional[Pattern] = None
    format: Optional[str] = None

    # numbers
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None
    exclusive_minimum: Optional[Union[int, float]] = None
    exclusive_maximum: Optional[Union[int, float]] = None
    multiple_of: Optional[Union[int, float]] = None

    # any kind
    enum_values: Optional[Tuple[Any, ...]] = None
    has_const: bool = False
    const: Any = None

    # combinators
    all_of: Optional[Tuple['SchemaNode', ...]] = None
    any_of: Optional[Tuple['SchemaNode', ...]] = None
    one_of: Optional[Tuple['SchemaNode', ...]] = None
    not_: Optional['SchemaNode'] = None
    if_: Optional['SchemaNode'] = None
    then_: Optional['SchemaNode'] = None
    else_: Optional['SchemaNode'] = None

    # identity and metadata, not used for validation
    schema_uri: Optional[str] = None
    id: Optional[str] = None
    ref: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def property_names_declared(self) -> FrozenSet[str]:
        """Names listed under ``properties``."""
        return frozenset(self.properties)


TRUE_SCHEMA = SchemaNode(boolean=True)
FALSE_SCHEMA = SchemaNode(boolean=False)


def compile_pattern(pattern: str) -> Pattern:
    """Compile an ECMA-262 style pattern with Python's regex engine."""
    return re.compile(pattern)

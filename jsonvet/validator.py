"""Validates decoded JSON instances against compiled schemas.

The Validator walks a SchemaNode and an instance together. Every applicable
constraint is checked, even after a failure, so the outcome carries the full
list of errors in a fixed order:

- type
- object, array, string or number constraints for the instance's kind
- const and enum
- combinators (see combinators.py)

The outcome score counts satisfied checks and is used to rank failing
alternatives of anyOf/oneOf.
"""

# pylint: disable=too-many-branches

import decimal
from typing import Any, FrozenSet

from jsonvet.combinators import CombinatorEvaluator
from jsonvet.formats import check_format
from jsonvet.results import ErrorKind, OutcomeBuilder, Path, ValidationOutcome
from jsonvet.schemanode import AdditionalMode, SchemaNode
from jsonvet.values import ARRAY, INTEGER, NUMBER, OBJECT, STRING, first_duplicate, json_equal, kind_of, matches_type


class ValidationDepthError(Exception):
    """Raised when validation descends deeper than the configured limit."""

    def __init__(self, max_depth: int, path: Path):
        self.max_depth = max_depth
        self.path = path
        super().__init__(f"Maximum validation depth {max_depth} exceeded")


class Validator:
    """Validates instances against SchemaNode trees.

    A Validator keeps no state between calls and can be shared freely.
    """

    def __init__(self, max_depth: int | None = None):
        """Initialize the validator.

        Args:
            max_depth: Optional limit on the instance nesting depth.
        """
        self.max_depth = max_depth
        self.combinators = CombinatorEvaluator(self)

    def validate(self, node: SchemaNode, instance: Any, path: Path = (), declared: FrozenSet[str] = frozenset()) -> ValidationOutcome:
        """Validates an instance against a node.

        Args:
            node: The compiled schema
            instance: The decoded JSON value
            path: Location of the instance within the document
            declared: Property names that sibling schemas of this object
                account for; they are never additional properties here

        Returns:
            ValidationOutcome: validity, score and errors of this node
        """
        if self.max_depth is not None and len(path) > self.max_depth:
            raise ValidationDepthError(self.max_depth, path)

        builder = OutcomeBuilder()
        if node.boolean is not None:
            if node.boolean:
                builder.checkpoint()
            else:
                builder.fail(ErrorKind.FALSE_SCHEMA, path)
            return builder.build()

        kind = kind_of(instance)
        type_ok = self._check_type(node, instance, kind, path, builder)
        if type_ok:
            if kind == OBJECT:
                self._check_object(node, instance, path, declared, builder)
                builder.checkpoint()
            elif kind == ARRAY:
                self._check_array(node, instance, path, builder)
                builder.checkpoint()
            elif kind == STRING:
                self._check_string(node, instance, path, builder)
                builder.checkpoint()
            elif kind in (INTEGER, NUMBER):
                self._check_number(node, instance, path, builder)
                builder.checkpoint()
            self._check_common(node, instance, path, builder)
            builder.checkpoint()

        self.combinators.evaluate(node, instance, path, declared, builder)
        builder.checkpoint()

        if type_ok:
            builder.checkpoint()
        return builder.build()

    def _check_type(self, node: SchemaNode, instance: Any, kind: str, path: Path, builder: OutcomeBuilder) -> bool:
        if not node.types or any(matches_type(instance, json_type) for json_type in node.types):
            return True
        builder.fail(ErrorKind.TYPE_MISMATCH, path, expected=', '.join(sorted(node.types)), given=kind)
        return False

    def _check_object(self, node: SchemaNode, instance: dict, path: Path, declared: FrozenSet[str], builder: OutcomeBuilder) -> None:
        for name in node.required:
            if name in instance:
                builder.checkpoint()
            else:
                builder.fail(ErrorKind.REQUIRED_MISSING, path, property=name)

        for name, child in node.properties.items():
            if name in instance:
                builder.merge(self.validate(child, instance[name], path + (name,)))

        for key, value in instance.items():
            matched = False
            for pattern_property in node.pattern_properties:
                if pattern_property.matches(key):
                    matched = True
                    builder.merge(self.validate(pattern_property.schema, value, path + (key,)))
            if matched or key in node.properties or key in declared:
                continue
            if node.additional_properties is AdditionalMode.FORBIDDEN:
                builder.fail(ErrorKind.ADDITIONAL_PROPERTY_FORBIDDEN, path, property=key)
            elif isinstance(node.additional_properties, SchemaNode):
                builder.merge(self.validate(node.additional_properties, value, path + (key,)))

        if node.min_properties is not None and len(instance) < node.min_properties:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'object-too-small', min=node.min_properties)
        if node.max_properties is not None and len(instance) > node.max_properties:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'object-too-large', max=node.max_properties)

        for name, dependency in node.dependencies.items():
            if name not in instance:
                continue
            if isinstance(dependency, SchemaNode):
                builder.merge(self.validate(dependency, instance, path, declared | node.property_names_declared))
                continue
            for required_name in dependency:
                if required_name not in instance:
                    builder.fail(ErrorKind.DEPENDENCY_MISSING, path, dependency=required_name)

        if node.property_names is not None:
            for key in instance:
                outcome = self.validate(node.property_names, key, path)
                if not outcome.valid:
                    builder.fail(ErrorKind.PROPERTY_NAME_VIOLATION, path, property=key)
                    builder.merge(outcome)

    def _check_array(self, node: SchemaNode, instance: list, path: Path, builder: OutcomeBuilder) -> None:
        if isinstance(node.items, SchemaNode):
            for i, item in enumerate(instance):
                builder.merge(self.validate(node.items, item, path + (i,)))
        elif isinstance(node.items, tuple):
            for i, item in enumerate(instance[:len(node.items)]):
                builder.merge(self.validate(node.items[i], item, path + (i,)))
            extra = instance[len(node.items):]
            if extra and node.additional_items is AdditionalMode.FORBIDDEN:
                builder.fail(ErrorKind.ADDITIONAL_ITEM_FORBIDDEN, path)
            elif isinstance(node.additional_items, SchemaNode):
                for i, item in enumerate(extra, start=len(node.items)):
                    builder.merge(self.validate(node.additional_items, item, path + (i,)))

        if node.min_items is not None and len(instance) < node.min_items:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'array-too-short', min=node.min_items)
        if node.max_items is not None and len(instance) > node.max_items:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'array-too-long', max=node.max_items)

        if node.unique_items:
            duplicate = first_duplicate(instance)
            if duplicate is not None:
                builder.fail(ErrorKind.UNIQUENESS_VIOLATION, path, i=duplicate[0], j=duplicate[1])

        if node.contains is not None:
            best = None
            for i, item in enumerate(instance):
                outcome = self.validate(node.contains, item, path + (i,))
                if outcome.valid:
                    break
                if best is None or outcome.score > best.score:
                    best = outcome
            else:
                builder.fail(ErrorKind.CONTAINS_VIOLATION, path)
                if best is not None:
                    builder.merge(best)

    def _check_string(self, node: SchemaNode, instance: str, path: Path, builder: OutcomeBuilder) -> None:
        length = len(instance)
        if node.min_length is not None and length < node.min_length:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'string-too-short', min=node.min_length)
        if node.max_length is not None and length > node.max_length:
            builder.fail(ErrorKind.LENGTH_VIOLATION, path, 'string-too-long', max=node.max_length)
        if node.pattern_regex is not None and node.pattern_regex.search(instance) is None:
            builder.fail(ErrorKind.PATTERN_MISMATCH, path, pattern=node.pattern)
        if node.format is not None and not check_format(node.format, instance):
            builder.fail(ErrorKind.FORMAT_MISMATCH, path, format=node.format)

    def _check_number(self, node: SchemaNode, instance: int | float, path: Path, builder: OutcomeBuilder) -> None:
        if node.multiple_of is not None and not _is_multiple(instance, node.multiple_of):
            builder.fail(ErrorKind.RANGE_VIOLATION, path, 'multiple-of', multiple=node.multiple_of)
        if node.minimum is not None and instance < node.minimum:
            builder.fail(ErrorKind.RANGE_VIOLATION, path, 'minimum', limit=node.minimum)
        if node.exclusive_minimum is not None and instance <= node.exclusive_minimum:
            builder.fail(ErrorKind.RANGE_VIOLATION, path, 'exclusive-minimum', limit=node.exclusive_minimum)
        if node.maximum is not None and instance > node.maximum:
            builder.fail(ErrorKind.RANGE_VIOLATION, path, 'maximum', limit=node.maximum)
        if node.exclusive_maximum is not None and instance >= node.exclusive_maximum:
            builder.fail(ErrorKind.RANGE_VIOLATION, path, 'exclusive-maximum', limit=node.exclusive_maximum)

    def _check_common(self, node: SchemaNode, instance: Any, path: Path, builder: OutcomeBuilder) -> None:
        if node.has_const and not json_equal(instance, node.const):
            builder.fail(ErrorKind.CONST_VIOLATION, path, allowed=node.const)
        if node.enum_values is not None and not any(json_equal(instance, value) for value in node.enum_values):
            builder.fail(ErrorKind.ENUM_VIOLATION, path, allowed=list(node.enum_values))


def _is_multiple(value: int | float, multiple: int | float) -> bool:
    if isinstance(value, int) and isinstance(multiple, int):
        return value % multiple == 0
    try:
        return decimal.Decimal(str(value)) % decimal.Decimal(str(multiple)) == 0
    except decimal.InvalidOperation:
        return (value / multiple).is_integer()

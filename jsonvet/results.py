"""Validation errors, outcomes and results."""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

import jsonpointer

from jsonvet.messages import render_message

PathSegment = Union[str, int]
Path = Tuple[PathSegment, ...]

ROOT_FIELD = '(root)'


class ErrorKind(str, enum.Enum):
    """Taxonomy of validation failures."""
    TYPE_MISMATCH = 'type-mismatch'
    REQUIRED_MISSING = 'required-missing'
    ADDITIONAL_PROPERTY_FORBIDDEN = 'additional-property-forbidden'
    PATTERN_MISMATCH = 'pattern-mismatch'
    RANGE_VIOLATION = 'range-violation'
    LENGTH_VIOLATION = 'length-violation'
    UNIQUENESS_VIOLATION = 'uniqueness-violation'
    NOT_VIOLATION = 'not-violation'
    ALLOF_VIOLATION = 'allof-violation'
    ANYOF_VIOLATION = 'anyof-violation'
    ONEOF_VIOLATION = 'oneof-violation'
    ENUM_VIOLATION = 'enum-violation'
    CONST_VIOLATION = 'const-violation'
    FORMAT_MISMATCH = 'format-mismatch'
    DEPENDENCY_MISSING = 'dependency-missing'
    PROPERTY_NAME_VIOLATION = 'property-name-violation'
    CONTAINS_VIOLATION = 'contains-violation'
    ADDITIONAL_ITEM_FORBIDDEN = 'additional-item-forbidden'
    CONDITION_THEN_VIOLATION = 'condition-then-violation'
    CONDITION_ELSE_VIOLATION = 'condition-else-violation'
    FALSE_SCHEMA = 'false-schema'


def render_field(path: Sequence[PathSegment]) -> str:
    """Render an instance path as ``(root)``, ``a.b``, ``items[0].name`` or ``[2]``."""
    if not path:
        return ROOT_FIELD
    text = ''
    for segment in path:
        if isinstance(segment, int):
            text += f'[{segment}]'
        elif text:
            text += f'.{segment}'
        else:
            text = segment
    return text


def render_pointer(path: Sequence[PathSegment]) -> str:
    """Render an instance path as an RFC 6901 JSON pointer."""
    return jsonpointer.JsonPointer.from_parts([str(segment) for segment in path]).path


@dataclass(frozen=True)
class ValidationError:
    """One reason why an instance does not satisfy a schema."""
    kind: ErrorKind
    path: Path
    message: str
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def field(self) -> str:
        return render_field(self.path)

    @property
    def pointer(self) -> str:
        return render_pointer(self.path)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationOutcome:
    """Validity, score and ordered errors of validating one node."""
    valid: bool
    score: int
    errors: Tuple[ValidationError, ...] = ()


class OutcomeBuilder:
    """Accumulates errors and score while one node is validated.

    Each builder is local to a single validation call; the outcome it builds is
    immutable.
    """

    ERROR_PENALTY = 2

    def __init__(self) -> None:
        self.errors: List[ValidationError] = []
        self.score = 0

    def checkpoint(self) -> None:
        """Credit a satisfied constraint or a completed check group."""
        self.score += 1

    def fail(self, kind: ErrorKind, path: Path, template_key: str | None = None, **details: Any) -> None:
        """Record an error at the current node."""
        message = render_message(template_key or kind.value, **details)
        self.errors.append(ValidationError(kind, path, message, details))
        self.score -= self.ERROR_PENALTY

    def merge(self, outcome: ValidationOutcome) -> None:
        """Fold a child outcome's errors and score into this node."""
        self.errors.extend(outcome.errors)
        self.score += outcome.score

    @property
    def valid(self) -> bool:
        return not self.errors

    def build(self) -> ValidationOutcome:
        return ValidationOutcome(valid=not self.errors, score=self.score, errors=tuple(self.errors))


class Result:
    """Result of validating a document against a schema."""

    def __init__(self, outcome: ValidationOutcome):
        self._outcome = outcome
        self.score = outcome.score

    @property
    def valid(self) -> bool:
        return self._outcome.valid

    @property
    def errors(self) -> List[ValidationError]:
        return list(self._outcome.errors)

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            return "The document is valid"
        return "\n".join(str(error) for error in self._outcome.errors)

    def __repr__(self) -> str:
        return f"Result(valid={self.valid}, score={self.score}, errors={len(self._outcome.errors)})"

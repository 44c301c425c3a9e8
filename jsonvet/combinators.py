"""Evaluation of the anyOf, oneOf, allOf, not and if/then/else keywords.

Combinator children are validated against the same instance and path as the
node that holds them. Their outcomes are merged into the node as follows:

- anyOf: silent when a child passes; otherwise a summary error followed by the
  errors of the child with the best score.
- oneOf: silent when exactly one child passes; a summary error followed by the
  best child's errors when none passes; only the summary when several pass.
- allOf: all children's errors, then a summary error if any child failed.
- not: a single error when the child passes.

When the instance is an object, each child also learns which property names
its siblings declare (see SiblingNames), so that ``additionalProperties: false``
inside an alternative does not reject properties another part of the schema
accounts for.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from jsonvet.results import ErrorKind, OutcomeBuilder, Path, ValidationOutcome
from jsonvet.schemanode import SchemaNode

ANY_OF = 'anyOf'
ONE_OF = 'oneOf'
ALL_OF = 'allOf'


class SiblingNames:
    """Tracks the property names visible to the combinator children of one node.

    A child sees the node's own names, the names declared by the children of the
    other combinators and, except for oneOf alternatives, by its siblings. Names
    declared only by alternatives that an earlier anyOf/oneOf did not accept are
    withdrawn for the combinators evaluated after it.
    """

    def __init__(self, node: SchemaNode, declared: FrozenSet[str]):
        self.base = frozenset(declared) | node.property_names_declared
        self.groups: Dict[str, Tuple[FrozenSet[str], ...]] = {
            ANY_OF: tuple(child.property_names_declared for child in node.any_of or ()),
            ONE_OF: tuple(child.property_names_declared for child in node.one_of or ()),
            ALL_OF: tuple(child.property_names_declared for child in node.all_of or ()),
        }
        self.rejected: Set[str] = set()

    def for_child(self, group: str, index: int) -> FrozenSet[str]:
        names = set(self.base)
        for other, children in self.groups.items():
            if other == group and group == ONE_OF:
                continue
            for j, child_names in enumerate(children):
                if other != group or j != index:
                    names |= child_names
        return frozenset(names - self.rejected)

    def for_any(self) -> FrozenSet[str]:
        names = set(self.base)
        for children in self.groups.values():
            for child_names in children:
                names |= child_names
        return frozenset(names - self.rejected)

    def settle(self, group: str, accepted: Iterable[int]) -> None:
        """Withdraw the names declared only by the alternatives not accepted."""
        accepted = set(accepted)
        children = self.groups[group]
        accepted_names: Set[str] = set()
        for i in accepted:
            accepted_names |= children[i]
        for j, child_names in enumerate(children):
            if j not in accepted:
                self.rejected |= child_names - accepted_names - self.base


def best_outcome(outcomes: List[ValidationOutcome]) -> Tuple[Optional[int], Optional[ValidationOutcome]]:
    """Returns the failing outcome with the highest score; the earliest wins ties."""
    best_index, best = None, None
    for i, outcome in enumerate(outcomes):
        if outcome.valid:
            continue
        if best is None or outcome.score > best.score:
            best_index, best = i, outcome
    return best_index, best


class CombinatorEvaluator:
    """Applies the combinator keywords of a node on behalf of a Validator."""

    def __init__(self, validator: Any):
        self.validator = validator

    def evaluate(self, node: SchemaNode, instance: Any, path: Path, declared: FrozenSet[str], builder: OutcomeBuilder) -> None:
        """Evaluates anyOf, oneOf, allOf, not and if/then/else, in that order."""
        names = SiblingNames(node, declared)
        if node.any_of is not None:
            self._any_of(node.any_of, instance, path, names, builder)
        if node.one_of is not None:
            self._one_of(node.one_of, instance, path, names, builder)
        if node.all_of is not None:
            self._all_of(node.all_of, instance, path, names, builder)
        if node.not_ is not None:
            outcome = self.validator.validate(node.not_, instance, path, names.for_any())
            if outcome.valid:
                builder.fail(ErrorKind.NOT_VIOLATION, path)
        if node.if_ is not None:
            self._condition(node, instance, path, names, builder)

    def _children(self, group: str, children: Tuple[SchemaNode, ...], instance: Any, path: Path, names: SiblingNames) -> List[ValidationOutcome]:
        return [
            self.validator.validate(child, instance, path, names.for_child(group, i))
            for i, child in enumerate(children)
        ]

    def _any_of(self, children: Tuple[SchemaNode, ...], instance: Any, path: Path, names: SiblingNames, builder: OutcomeBuilder) -> None:
        outcomes = self._children(ANY_OF, children, instance, path, names)
        accepted = [i for i, outcome in enumerate(outcomes) if outcome.valid]
        if not accepted:
            builder.fail(ErrorKind.ANYOF_VIOLATION, path)
            best_index, best = best_outcome(outcomes)
            if best is not None:
                builder.merge(best)
                accepted = [best_index]
        names.settle(ANY_OF, accepted)

    def _one_of(self, children: Tuple[SchemaNode, ...], instance: Any, path: Path, names: SiblingNames, builder: OutcomeBuilder) -> None:
        outcomes = self._children(ONE_OF, children, instance, path, names)
        accepted = [i for i, outcome in enumerate(outcomes) if outcome.valid]
        if len(accepted) != 1:
            builder.fail(ErrorKind.ONEOF_VIOLATION, path)
        if not accepted:
            best_index, best = best_outcome(outcomes)
            if best is not None:
                builder.merge(best)
                accepted = [best_index]
        names.settle(ONE_OF, accepted)

    def _all_of(self, children: Tuple[SchemaNode, ...], instance: Any, path: Path, names: SiblingNames, builder: OutcomeBuilder) -> None:
        outcomes = self._children(ALL_OF, children, instance, path, names)
        for outcome in outcomes:
            builder.merge(outcome)
        if not all(outcome.valid for outcome in outcomes):
            builder.fail(ErrorKind.ALLOF_VIOLATION, path)

    def _condition(self, node: SchemaNode, instance: Any, path: Path, names: SiblingNames, builder: OutcomeBuilder) -> None:
        visible = names.for_any()
        condition = self.validator.validate(node.if_, instance, path, visible)
        if condition.valid and node.then_ is not None:
            outcome = self.validator.validate(node.then_, instance, path, visible)
            if not outcome.valid:
                builder.fail(ErrorKind.CONDITION_THEN_VIOLATION, path)
                builder.merge(outcome)
        elif not condition.valid and node.else_ is not None:
            outcome = self.validator.validate(node.else_, instance, path, visible)
            if not outcome.valid:
                builder.fail(ErrorKind.CONDITION_ELSE_VIOLATION, path)
                builder.merge(outcome)

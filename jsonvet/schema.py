"""Compiled schema wrapper and the top-level validate() helper."""

from typing import Any, Optional, Union

from jsonvet.compiler import Resolver, SchemaCompiler
from jsonvet.results import Result
from jsonvet.schemanode import SchemaNode
from jsonvet.validator import Validator


class Schema:
    """A compiled JSON Schema that can validate any number of documents.

    Compiled schemas are immutable; validating the same Schema from several
    threads at once is safe.
    """

    def __init__(self, root: SchemaNode, max_depth: Optional[int] = None):
        self.root = root
        self.validator = Validator(max_depth=max_depth)

    @classmethod
    def compile(cls, raw_schema: Any, resolver: Optional[Resolver] = None, base_uri: Optional[str] = None,
                draft: Optional[int] = None, max_depth: Optional[int] = None) -> 'Schema':
        """Compiles a decoded schema document.

        Raises:
            CompileError: If the schema is malformed or a reference cannot be resolved.
        """
        compiler = SchemaCompiler(resolver=resolver, base_uri=base_uri, draft=draft)
        return cls(compiler.compile(raw_schema), max_depth=max_depth)

    @property
    def id(self) -> Optional[str]:
        return self.root.id

    @property
    def schema_uri(self) -> Optional[str]:
        return self.root.schema_uri

    def validate(self, instance: Any) -> Result:
        """Validates a decoded JSON document.

        Args:
            instance: The decoded document

        Returns:
            Result: validity, score and the ordered list of errors
        """
        return Result(self.validator.validate(self.root, instance))

    def is_valid(self, instance: Any) -> bool:
        return self.validate(instance).valid

    def __repr__(self) -> str:
        return f"Schema(id={self.id!r})"


def validate(schema: Union[Schema, SchemaNode, dict, bool], instance: Any, resolver: Optional[Resolver] = None) -> Result:
    """Validates an instance against a Schema, a SchemaNode, or a decoded schema document.

    Args:
        schema: The schema to validate against
        instance: The decoded document
        resolver: Resolver for ``$ref`` when ``schema`` still has to be compiled

    Returns:
        Result: validity, score and the ordered list of errors
    """
    if isinstance(schema, SchemaNode):
        schema = Schema(schema)
    elif not isinstance(schema, Schema):
        schema = Schema.compile(schema, resolver=resolver)
    return schema.validate(instance)

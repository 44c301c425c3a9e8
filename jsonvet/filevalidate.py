"""Validates JSON instance files against JSON Schema files.

This module is the file-level surface around the validation core: it loads
schema and instance files, accepts single documents, JSON arrays and JSON
Lines, and reports one result per instance.
"""

import json
import logging
import sys
from typing import Any, List, Tuple

from jsonvet.compiler import CompileError
from jsonvet.constants import DEFAULT_MAX_DEPTH
from jsonvet.resolver import UrlResolver, file_uri
from jsonvet.results import ValidationError
from jsonvet.schema import Schema

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of validating one JSON instance from a file."""

    def __init__(self, is_valid: bool, errors: List[ValidationError] | None = None, instance_path: str | None = None, score: int = 0):
        self.is_valid = is_valid
        self.errors = errors or []
        self.instance_path = instance_path
        self.score = score

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Valid" + (f": {self.instance_path}" if self.instance_path else "")
        prefix = f"{self.instance_path}: " if self.instance_path else ""
        return f"✗ Invalid: {prefix}" + "; ".join(str(error) for error in self.errors)

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, errors={[str(e) for e in self.errors]})"


def load_schema_file(schema_file: str, max_depth: int | None = None) -> Schema:
    """Loads and compiles a schema file.

    References to other files are resolved relative to the schema file;
    ``http(s)`` references are fetched.

    Raises:
        CompileError: If the schema cannot be compiled.
        OSError, json.JSONDecodeError: If the file cannot be read or parsed.
    """
    with open(schema_file, 'r', encoding='utf-8') as f:
        raw_schema = json.load(f)
    logger.debug("Compiling schema %s", schema_file)
    return Schema.compile(raw_schema, resolver=UrlResolver(), base_uri=file_uri(schema_file), max_depth=max_depth)


def load_instances(instance_file: str, schema_is_array: bool = False) -> List[Tuple[Any, str]]:
    """Loads the instances contained in a file.

    Args:
        instance_file: Path to a JSON document, JSON array or JSONL file
        schema_is_array: Whether the schema expects an array at the root; a
            JSON array is then one instance rather than a list of instances

    Returns:
        List of (instance, instance path) tuples
    """
    with open(instance_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        instances = []
        for i, line in enumerate(content.split('\n')):
            line = line.strip()
            if line:
                instances.append((json.loads(line), f"{instance_file}:{i+1}"))
        return instances

    if isinstance(data, list) and not schema_is_array:
        return [(item, f"{instance_file}[{i}]") for i, item in enumerate(data)]
    return [(data, instance_file)]


def validate_file(instance_file: str, schema: Schema | str) -> List[ValidationResult]:
    """Validates JSON instance(s) in a file against a schema.

    Args:
        instance_file: Path to JSON file (single object, array, or JSONL)
        schema: A compiled Schema or the path to a schema file

    Returns:
        List of ValidationResult for each instance in the file
    """
    if isinstance(schema, str):
        schema = load_schema_file(schema)
    schema_is_array = 'array' in schema.root.types and len(schema.root.types) == 1

    results = []
    for instance, path in load_instances(instance_file, schema_is_array):
        result = schema.validate(instance)
        results.append(ValidationResult(result.valid, result.errors, path, result.score))
    return results


def validate_json_instances(input_files: List[str], schema_file: str, verbose: bool = False,
                            show_score: bool = False, max_depth: int | None = None) -> Tuple[int, int]:
    """Validates multiple JSON instance files against a schema file.

    Returns:
        Tuple of (valid_count, invalid_count)
    """
    schema = load_schema_file(schema_file, max_depth=max_depth)
    valid_count = 0
    invalid_count = 0

    for input_file in input_files:
        for result in validate_file(input_file, schema):
            if result.is_valid:
                valid_count += 1
            else:
                invalid_count += 1
            if verbose:
                print(result)
                if show_score:
                    print(f"  score: {result.score}")

    return valid_count, invalid_count


# Command entry points for the jsonvet CLI
def validate(input: List[str], schema: str, quiet: bool = False, show_score: bool = False, max_depth: int | None = DEFAULT_MAX_DEPTH) -> None:  # pylint: disable=redefined-builtin
    """Validates JSON instances against a JSON Schema file.

    Args:
        input: List of JSON files to validate
        schema: Path to schema file
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
        show_score: Print each instance's validation score
        max_depth: Maximum nesting depth to validate
    """
    valid_count, invalid_count = validate_json_instances(
        input_files=input,
        schema_file=schema,
        verbose=not quiet,
        show_score=show_score,
        max_depth=max_depth
    )

    if not quiet:
        total = valid_count + invalid_count
        print(f"\nValidation summary: {valid_count}/{total} instances valid")

    if invalid_count > 0:
        sys.exit(1)


def check_schema(schema: str, quiet: bool = False) -> None:
    """Compiles a schema file and reports whether it is usable."""
    try:
        load_schema_file(schema)
    except CompileError as e:
        if not quiet:
            print(f"✗ {e}")
        sys.exit(1)
    if not quiet:
        print("✓ Schema compiles")

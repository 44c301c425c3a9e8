"""Tests for validating instance files against schema files."""

import json
import os
import sys
import tempfile
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonvet.compiler import UnresolvedReferenceError
from jsonvet.filevalidate import ValidationResult, load_instances, load_schema_file, validate_file, validate_json_instances


def get_schema(name):
    """Provides the path of a schema file."""
    return os.path.join(os.path.dirname(__file__), 'jsonschema', name)


class TestValidateFile(unittest.TestCase):
    """Test file-level validation."""

    def test_single_document(self):
        """A single JSON document is one instance; referenced files are loaded."""
        results = validate_file(get_schema('person.json'), get_schema('person.schema.json'))
        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].is_valid)
        self.assertEqual(results[0].instance_path, get_schema('person.json'))
        self.assertGreater(results[0].score, 0)

    def test_json_array(self):
        """Each element of a JSON array is validated separately."""
        results = validate_file(get_schema('people.json'), get_schema('person.schema.json'))
        self.assertEqual([r.is_valid for r in results], [True, False])
        self.assertTrue(results[1].instance_path.endswith('people.json[1]'))
        self.assertEqual([str(e) for e in results[1].errors], [
            "name: String length must be greater than or equal to 1",
            "age: Must be greater than or equal to 0",
        ])

    def test_json_array_against_array_schema(self):
        """A JSON array is a single instance when the schema expects an array."""
        results = validate_file(get_schema('people.json'), get_schema('people.schema.json'))
        self.assertEqual(len(results), 1)
        self.assertFalse(results[0].is_valid)
        self.assertEqual([str(e) for e in results[0].errors], [
            "[1].name: String length must be greater than or equal to 1",
            "[1].age: Must be greater than or equal to 0",
        ])

    def test_jsonl(self):
        """Each line of a JSON Lines file is one instance."""
        results = validate_file(get_schema('people.jsonl'), get_schema('person.schema.json'))
        self.assertEqual([r.is_valid for r in results], [True, False, False])
        self.assertTrue(results[1].instance_path.endswith('people.jsonl:2'))
        self.assertEqual([str(e) for e in results[1].errors], [
            "(root): name is required",
            "age: Invalid type. Expected: integer, given: string",
        ])
        self.assertEqual([str(e) for e in results[2].errors], [
            "address: Additional property country is not allowed",
        ])

    def test_compiled_schema_is_accepted(self):
        """A compiled schema can be reused across files."""
        schema = load_schema_file(get_schema('person.schema.json'))
        self.assertEqual(len(validate_file(get_schema('person.json'), schema)), 1)
        self.assertEqual(len(validate_file(get_schema('people.jsonl'), schema)), 3)

    def test_temporary_files(self):
        """Schemas and instances outside the fixture directory."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False, encoding='utf-8') as f:
            json.dump({"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]}, f)
            schema_path = f.name
        with tempfile.NamedTemporaryFile(mode='w', suffix='.jsonl', delete=False, encoding='utf-8') as f:
            f.write('{"id": 1}\n\n{"id": "2"}\n')
            instance_path = f.name
        try:
            results = validate_file(instance_path, schema_path)
            self.assertEqual([r.is_valid for r in results], [True, False])
            self.assertTrue(results[1].instance_path.endswith(':3'))
        finally:
            os.unlink(schema_path)
            os.unlink(instance_path)

    def test_unresolvable_reference(self):
        """A schema with a dangling reference does not load."""
        with self.assertRaises(UnresolvedReferenceError) as context:
            load_schema_file(get_schema('broken.schema.json'))
        self.assertEqual(context.exception.ref, '#/definitions/missing')
        self.assertEqual(context.exception.schema_path, '#/properties/parent/$ref')


class TestLoadInstances(unittest.TestCase):
    """Test splitting instance files into instances."""

    def test_array_is_split(self):
        """A JSON array yields one instance per element."""
        instances = load_instances(get_schema('people.json'))
        self.assertEqual(len(instances), 2)
        self.assertEqual(instances[0][0], {"name": "Ada", "age": 36})

    def test_array_is_kept(self):
        """A JSON array stays whole when the schema describes arrays."""
        instances = load_instances(get_schema('people.json'), schema_is_array=True)
        self.assertEqual(len(instances), 1)
        self.assertEqual(len(instances[0][0]), 2)


class TestValidateJsonInstances(unittest.TestCase):
    """Test counting results over several files."""

    def test_counts(self):
        """Valid and invalid instances are counted over all files."""
        valid, invalid = validate_json_instances(
            [get_schema('person.json'), get_schema('people.json'), get_schema('people.jsonl')],
            get_schema('person.schema.json'))
        self.assertEqual((valid, invalid), (3, 3))


class TestValidationResult(unittest.TestCase):
    """Test the printable form of a file result."""

    def test_str(self):
        """Valid and invalid results render with their instance path."""
        self.assertEqual(str(ValidationResult(True, instance_path='a.json')), "✓ Valid: a.json")
        results = validate_file(get_schema('people.json'), get_schema('person.schema.json'))
        text = str(results[1])
        self.assertTrue(text.startswith("✗ Invalid: "))
        self.assertIn("name: String length must be greater than or equal to 1; age:", text)


if __name__ == '__main__':
    unittest.main()

"""Tests for schema document resolvers."""

import json
import os
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonvet.compiler import UnresolvedReferenceError, compile_schema
from jsonvet.resolver import MappingResolver, UrlResolver, file_uri
from jsonvet.schema import Schema


def mock_response(payload, status_code=200):
    response = MagicMock()
    response.text = json.dumps(payload)
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


class TestMappingResolver(unittest.TestCase):

    def test_lookup_ignores_fragment(self):
        """Documents are found by URI without fragment."""
        resolver = MappingResolver({"urn:a#": {"type": "string"}})
        self.assertEqual(resolver("urn:a#/definitions/x"), {"type": "string"})
        with self.assertRaises(LookupError):
            resolver("urn:b")


class TestUrlResolver(unittest.TestCase):

    @patch('jsonvet.resolver.requests.get')
    def test_http(self, mock_get):
        """HTTP documents are fetched once and cached."""
        mock_get.return_value = mock_response({"type": "integer"})
        resolver = UrlResolver(timeout=5)
        self.assertEqual(resolver("https://example.com/int.json"), {"type": "integer"})
        self.assertEqual(resolver("https://example.com/int.json#/x"), {"type": "integer"})
        mock_get.assert_called_once_with("https://example.com/int.json", timeout=5)

    @patch('jsonvet.resolver.requests.get')
    def test_http_error(self, mock_get):
        """HTTP errors surface as unresolved references."""
        mock_get.return_value = mock_response({}, status_code=404)
        with self.assertRaises(UnresolvedReferenceError) as context:
            compile_schema({"$ref": "https://example.com/missing.json"}, resolver=UrlResolver())
        self.assertIn("404", str(context.exception))

    @patch('jsonvet.resolver.requests.get')
    def test_compile_with_http_reference(self, mock_get):
        """A remote definition is used during validation."""
        mock_get.return_value = mock_response({"definitions": {"id": {"type": "string", "pattern": "^[a-z]+$"}}})
        schema = Schema.compile({"properties": {"id": {"$ref": "https://example.com/defs.json#/definitions/id"}}},
                                resolver=UrlResolver())
        self.assertTrue(schema.is_valid({"id": "abc"}))
        self.assertEqual([str(e) for e in schema.validate({"id": "ABC"}).errors],
                         ["id: Does not match pattern '^[a-z]+$'"])

    def test_file(self):
        """file URIs are read from disk."""
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'leaf schema.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({"type": "boolean"}, f)
            uri = file_uri(path).replace(' ', '%20')
            self.assertEqual(UrlResolver()(uri), {"type": "boolean"})

    def test_import_map(self):
        """Mapped URIs are served from local files."""
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'mapped.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({"type": "null"}, f)
            resolver = UrlResolver(import_map={"https://example.com/mapped.json": path})
            with patch('jsonvet.resolver.requests.get') as mock_get:
                self.assertEqual(resolver("https://example.com/mapped.json"), {"type": "null"})
                mock_get.assert_not_called()

    def test_unsupported_scheme(self):
        with self.assertRaises(NotImplementedError):
            UrlResolver().fetch_content("ftp://example.com/a.json")

    def test_invalid_json(self):
        """Documents that are not JSON raise ValueError."""
        resolver = UrlResolver()
        resolver.content_cache["https://example.com/bad.json"] = "{not json"
        with self.assertRaises(ValueError):
            resolver("https://example.com/bad.json")


if __name__ == '__main__':
    unittest.main()

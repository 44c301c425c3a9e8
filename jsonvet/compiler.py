""" JSON Schema compiler.

Turns a decoded JSON Schema document into an immutable tree of SchemaNode
objects. Every sub-schema is compiled eagerly and every ``$ref`` is replaced by
the compiled target, so validation never looks at the raw document again.
"""

# pylint: disable=too-many-branches, too-many-statements, too-many-locals, line-too-long

import dataclasses
import logging
import re
from typing import Any, Callable, Dict, Optional, Set, Tuple
from urllib.parse import unquote, urldefrag, urljoin

import jsonpointer
from jsonpointer import JsonPointerException

from jsonvet import formats
from jsonvet.constants import DRAFT_4, DRAFT_6, DRAFT_7, detect_draft
from jsonvet.schemanode import AdditionalMode, FALSE_SCHEMA, PatternProperty, SchemaNode, TRUE_SCHEMA, compile_pattern
from jsonvet.values import JSON_TYPES, is_integer, is_number

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Any]
Location = Tuple[str, ...]

METADATA_KEYWORDS = ('$schema', '$id', 'id', 'title', 'description')
DEFINITION_KEYWORDS = ('definitions', '$defs')
VALUE_KEYWORDS = ('enum', 'const', 'default', 'examples')


def render_location(location: Location) -> str:
    """Render a schema location as a URI fragment, e.g. ``#/properties/a``."""
    return '#' + jsonpointer.JsonPointer.from_parts(list(location)).path


class CompileError(Exception):
    """
    Raised when a schema cannot be compiled.

    Attributes:
        message: Human-readable error description
        schema_path: Location of the offending schema within its document
    """

    def __init__(self, message: str, schema_path: str = '#'):
        self.message = message
        self.schema_path = schema_path
        super().__init__(f"{message} at {schema_path}")


class MalformedKeywordError(CompileError):
    """A keyword has a value of the wrong kind or out of range."""

    def __init__(self, keyword: str, message: str, schema_path: str = '#'):
        self.keyword = keyword
        super().__init__(f"Invalid '{keyword}': {message}", schema_path)


class UnresolvedReferenceError(CompileError):
    """A ``$ref`` could not be resolved into a finite schema."""

    def __init__(self, ref: str, message: str, schema_path: str = '#'):
        self.ref = ref
        super().__init__(f"Cannot resolve $ref '{ref}': {message}", schema_path)


class SchemaDocument:
    """A decoded schema document together with its URI and plain-name anchors."""

    def __init__(self, root: Any, uri: str):
        self.root = root
        self.uri = uri
        self.anchors: Dict[str, Location] = {}
        self._collect_anchors(root, ())

    def _collect_anchors(self, schema: Any, location: Location) -> None:
        if isinstance(schema, dict):
            for id_keyword in ('$id', 'id'):
                schema_id = schema.get(id_keyword)
                if isinstance(schema_id, str) and schema_id.startswith('#') and len(schema_id) > 1:
                    self.anchors.setdefault(schema_id[1:], location)
            for key, value in schema.items():
                if key not in VALUE_KEYWORDS:
                    self._collect_anchors(value, location + (key,))
        elif isinstance(schema, list):
            for i, item in enumerate(schema):
                self._collect_anchors(item, location + (str(i),))


class SchemaCompiler:
    """
    Compiles JSON Schema documents into SchemaNode trees.

    Attributes:
    resolver: Callable returning the decoded document for a URI, used for
        references outside the document being compiled.
    base_uri: URI of the root document, used to resolve relative references.
    draft: Forced draft number (4, 6 or 7); detected from ``$schema`` when None.
    documents: Documents loaded through the resolver, by URI.
    """

    def __init__(self, resolver: Optional[Resolver] = None, base_uri: Optional[str] = None, draft: Optional[int] = None) -> None:
        if draft not in (None, DRAFT_4, DRAFT_6, DRAFT_7):
            raise ValueError(f"Unsupported draft: {draft}")
        self.resolver = resolver
        self.base_uri = base_uri or ''
        self.draft = draft
        self.documents: Dict[str, SchemaDocument] = {}
        self._active_draft: Optional[int] = draft
        self._reported_formats: Set[str] = set()
        self._compiled: Dict[Tuple[str, Location, str], SchemaNode] = {}

    def compile(self, raw_schema: Any) -> SchemaNode:
        """
        Compile a decoded schema document.

        Args:
            raw_schema: The decoded schema (a dict or a boolean).

        Returns:
            SchemaNode: The root of the compiled tree.

        Raises:
            MalformedKeywordError: If a keyword has an invalid value.
            UnresolvedReferenceError: If a ``$ref`` cannot be resolved.
        """
        self._active_draft = self.draft
        self._compiled = {}
        if self._active_draft is None and isinstance(raw_schema, dict):
            self._active_draft = detect_draft(raw_schema.get('$schema'))
        base_uri = self.base_uri
        if isinstance(raw_schema, dict):
            root_id = raw_schema.get('$id', raw_schema.get('id'))
            if isinstance(root_id, str) and not root_id.startswith('#'):
                base_uri = urljoin(base_uri, root_id) if base_uri else root_id
        document = SchemaDocument(raw_schema, urldefrag(base_uri)[0])
        if document.uri:
            self.documents.setdefault(document.uri, document)
        self._register_embedded(raw_schema, base_uri)
        return self._compile(raw_schema, document, (), base_uri, ())

    def _register_embedded(self, schema: Any, base_uri: str) -> None:
        """Register the sub-schemas that carry their own ``$id`` as documents of their own."""
        if isinstance(schema, dict):
            children = [value for key, value in schema.items() if key not in VALUE_KEYWORDS]
        elif isinstance(schema, list):
            children = schema
        else:
            return
        for child in children:
            child_base = base_uri
            if isinstance(child, dict) and '$ref' not in child:
                child_id = child.get('$id', child.get('id'))
                if isinstance(child_id, str) and not child_id.startswith('#'):
                    child_base = urljoin(base_uri, child_id) if base_uri else child_id
                    child_uri = urldefrag(child_base)[0]
                    if child_uri not in self.documents:
                        self.documents[child_uri] = SchemaDocument(child, child_uri)
            self._register_embedded(child, child_base)

    def _compile(self, raw: Any, document: SchemaDocument, location: Location, base_uri: str, ref_stack: Tuple[Tuple[str, Location], ...]) -> SchemaNode:
        where = render_location(location)
        if isinstance(raw, bool):
            if self._active_draft == DRAFT_4:
                raise MalformedKeywordError('schema', 'boolean schemas require draft-06 or later', where)
            return TRUE_SCHEMA if raw else FALSE_SCHEMA
        if not isinstance(raw, dict):
            raise MalformedKeywordError('schema', 'a schema must be an object or a boolean', where)

        if '$ref' in raw:
            return self._compile_reference(raw, document, location, base_uri, ref_stack)

        schema_id = raw.get('$id', raw.get('id'))
        if isinstance(schema_id, str) and not schema_id.startswith('#') and location:
            base_uri = urljoin(base_uri, schema_id) if base_uri else schema_id
            document = self.documents.get(urldefrag(base_uri)[0], document)

        def sub(value: Any, *parts: str) -> SchemaNode:
            return self._compile(value, document, location + parts, base_uri, ref_stack)

        attrs: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for keyword, value in raw.items():
            if keyword == 'type':
                attrs['types'] = self._parse_types(value, where)
            elif keyword == 'properties':
                self._expect(isinstance(value, dict), keyword, 'must be an object', where)
                attrs['properties'] = {name: sub(child, keyword, name) for name, child in value.items()}
            elif keyword == 'patternProperties':
                self._expect(isinstance(value, dict), keyword, 'must be an object', where)
                attrs['pattern_properties'] = tuple(
                    PatternProperty(pattern, self._parse_regex(pattern, keyword, where), sub(child, keyword, pattern))
                    for pattern, child in value.items())
            elif keyword == 'additionalProperties':
                attrs['additional_properties'] = self._parse_additional(value, keyword, sub, where)
            elif keyword == 'required':
                attrs['required'] = self._parse_string_array(value, keyword, where)
            elif keyword in ('minProperties', 'maxProperties', 'minItems', 'maxItems', 'minLength', 'maxLength'):
                attrs[_snake(keyword)] = self._parse_count(value, keyword, where)
            elif keyword == 'dependencies':
                self._expect(isinstance(value, dict), keyword, 'must be an object', where)
                attrs['dependencies'] = {
                    name: self._parse_string_array(dependency, keyword, where) if isinstance(dependency, list) else sub(dependency, keyword, name)
                    for name, dependency in value.items()}
            elif keyword == 'propertyNames':
                attrs['property_names'] = sub(value, keyword)
            elif keyword == 'items':
                if isinstance(value, list):
                    attrs['items'] = tuple(sub(child, keyword, str(i)) for i, child in enumerate(value))
                else:
                    attrs['items'] = sub(value, keyword)
            elif keyword == 'additionalItems':
                attrs['additional_items'] = self._parse_additional(value, keyword, sub, where)
            elif keyword == 'uniqueItems':
                self._expect(isinstance(value, bool), keyword, 'must be a boolean', where)
                attrs['unique_items'] = value
            elif keyword == 'contains':
                attrs['contains'] = sub(value, keyword)
            elif keyword == 'pattern':
                self._expect(isinstance(value, str), keyword, 'must be a string', where)
                attrs['pattern'] = value
                attrs['pattern_regex'] = self._parse_regex(value, keyword, where)
            elif keyword == 'format':
                self._expect(isinstance(value, str), keyword, 'must be a string', where)
                if not formats.is_known_format(value) and value not in self._reported_formats:
                    self._reported_formats.add(value)
                    logger.warning("Unknown format '%s' at %s is not checked", value, where)
                attrs['format'] = value
            elif keyword in ('minimum', 'maximum'):
                self._expect(is_number(value), keyword, 'must be a number', where)
                attrs[keyword] = value
            elif keyword in ('exclusiveMinimum', 'exclusiveMaximum'):
                attrs.update(self._parse_exclusive(keyword, value, raw, where))
            elif keyword == 'multipleOf':
                self._expect(is_number(value) and value > 0, keyword, 'must be a number strictly greater than 0', where)
                attrs['multiple_of'] = value
            elif keyword == 'enum':
                self._expect(isinstance(value, list), keyword, 'must be an array', where)
                attrs['enum_values'] = tuple(value)
            elif keyword == 'const':
                attrs['has_const'] = True
                attrs['const'] = value
            elif keyword in ('allOf', 'anyOf', 'oneOf'):
                self._expect(isinstance(value, list), keyword, 'must be an array of schemas', where)
                attrs[_snake(keyword)] = tuple(sub(child, keyword, str(i)) for i, child in enumerate(value))
            elif keyword == 'not':
                attrs['not_'] = sub(value, keyword)
            elif keyword in ('if', 'then', 'else') and self._active_draft not in (DRAFT_4, DRAFT_6):
                attrs[keyword + '_'] = sub(value, keyword)
            elif keyword in DEFINITION_KEYWORDS:
                # definitions are compiled only when referenced
                self._expect(isinstance(value, dict), keyword, 'must be an object', where)
                extras[keyword] = value
            elif keyword in METADATA_KEYWORDS:
                attrs.update(self._parse_metadata(keyword, value, where))
            else:
                extras[keyword] = value

        if 'exclusive_minimum' in attrs and attrs.get('exclusive_minimum') is True:
            # draft-04 boolean form turns minimum into an exclusive bound
            attrs['exclusive_minimum'] = attrs.pop('minimum')
        if 'exclusive_maximum' in attrs and attrs.get('exclusive_maximum') is True:
            attrs['exclusive_maximum'] = attrs.pop('maximum')
        if 'if_' not in attrs:
            attrs.pop('then_', None)
            attrs.pop('else_', None)
        attrs['extras'] = extras
        return SchemaNode(**attrs)

    def _compile_reference(self, raw: dict, document: SchemaDocument, location: Location, base_uri: str, ref_stack: Tuple[Tuple[str, Location], ...]) -> SchemaNode:
        where = render_location(location + ('$ref',))
        ref = raw['$ref']
        if not isinstance(ref, str):
            raise MalformedKeywordError('$ref', 'must be a string', where)

        target_uri = urljoin(base_uri, ref) if base_uri else ref
        document_uri, fragment = urldefrag(target_uri)
        if not document_uri or document_uri == document.uri:
            target_document = document
        else:
            target_document = self._load_document(ref, document_uri, where)

        fragment = unquote(fragment)
        if not fragment or fragment.startswith('/'):
            try:
                target_location: Location = tuple(jsonpointer.JsonPointer(fragment).parts)
                target = jsonpointer.resolve_pointer(target_document.root, fragment)
            except JsonPointerException as e:
                raise UnresolvedReferenceError(ref, str(e), where) from e
        elif fragment in target_document.anchors:
            target_location = target_document.anchors[fragment]
            target = jsonpointer.resolve_pointer(target_document.root, jsonpointer.JsonPointer.from_parts(list(target_location)).path)
        else:
            raise UnresolvedReferenceError(ref, f"no schema with id '#{fragment}'", where)

        key = (target_document.uri, target_location)
        if key in ref_stack:
            raise UnresolvedReferenceError(ref, 'circular reference cannot be expanded into a finite schema', where)
        logger.debug("Resolved $ref %s at %s to %s%s", ref, where, target_document.uri, render_location(target_location))

        target_base = target_document.uri if target_document is not document else base_uri
        compiled_key = (target_document.uri, target_location, target_base)
        node = self._compiled.get(compiled_key)
        if node is None:
            node = self._compile(target, target_document, target_location, target_base, ref_stack + (key,))
            self._compiled[compiled_key] = node
        return _with_ref(node, ref)

    def _load_document(self, ref: str, document_uri: str, where: str) -> SchemaDocument:
        if document_uri in self.documents:
            return self.documents[document_uri]
        if self.resolver is None:
            raise UnresolvedReferenceError(ref, f"no resolver available to load {document_uri}", where)
        logger.debug("Loading referenced schema document %s", document_uri)
        try:
            root = self.resolver(document_uri)
        except Exception as e:  # pylint: disable=broad-except
            raise UnresolvedReferenceError(ref, f"failed to load {document_uri}: {e}", where) from e
        document = SchemaDocument(root, document_uri)
        self.documents[document_uri] = document
        self._register_embedded(root, document_uri)
        return document

    @staticmethod
    def _expect(condition: bool, keyword: str, message: str, where: str) -> None:
        if not condition:
            raise MalformedKeywordError(keyword, message, where)

    def _parse_types(self, value: Any, where: str) -> frozenset:
        names = [value] if isinstance(value, str) else value
        self._expect(isinstance(names, list) and all(isinstance(n, str) for n in names), 'type', 'must be a string or an array of strings', where)
        for name in names:
            self._expect(name in JSON_TYPES, 'type', f"unknown type '{name}'", where)
        return frozenset(names)

    def _parse_string_array(self, value: Any, keyword: str, where: str) -> Tuple[str, ...]:
        self._expect(isinstance(value, list) and all(isinstance(v, str) for v in value), keyword, 'must be an array of strings', where)
        self._expect(len(set(value)) == len(value), keyword, 'entries must be unique', where)
        return tuple(value)

    def _parse_count(self, value: Any, keyword: str, where: str) -> int:
        self._expect(is_integer(value) and value >= 0, keyword, 'must be a non-negative integer', where)
        return int(value)

    def _parse_regex(self, pattern: str, keyword: str, where: str) -> re.Pattern:
        try:
            return compile_pattern(pattern)
        except re.error as e:
            raise MalformedKeywordError(keyword, f"invalid regular expression '{pattern}': {e}", where) from e

    def _parse_additional(self, value: Any, keyword: str, sub: Callable[..., SchemaNode], where: str) -> Any:
        if isinstance(value, bool):
            return AdditionalMode.ALLOWED if value else AdditionalMode.FORBIDDEN
        self._expect(isinstance(value, dict), keyword, 'must be a boolean or a schema', where)
        return sub(value, keyword)

    def _parse_exclusive(self, keyword: str, value: Any, raw: dict, where: str) -> Dict[str, Any]:
        attr = _snake(keyword)
        if isinstance(value, bool):
            self._expect(self._active_draft in (None, DRAFT_4), keyword, 'must be a number', where)
            bound = 'minimum' if keyword == 'exclusiveMinimum' else 'maximum'
            self._expect(not value or bound in raw, keyword, f"requires '{bound}'", where)
            return {attr: True} if value else {}
        self._expect(is_number(value), keyword, 'must be a number or a boolean', where)
        self._expect(self._active_draft != DRAFT_4, keyword, 'must be a boolean in draft-04', where)
        return {attr: value}

    def _parse_metadata(self, keyword: str, value: Any, where: str) -> Dict[str, Any]:
        self._expect(isinstance(value, str), keyword, 'must be a string', where)
        if keyword == '$schema':
            return {'schema_uri': value}
        if keyword in ('$id', 'id'):
            return {'id': value}
        return {keyword: value}


def _snake(keyword: str) -> str:
    return re.sub(r'([A-Z])', lambda m: '_' + m.group(1).lower(), keyword)


def _with_ref(node: SchemaNode, ref: str) -> SchemaNode:
    if node.boolean is not None:
        return node
    return dataclasses.replace(node, ref=ref)


def compile_schema(raw_schema: Any, resolver: Optional[Resolver] = None, base_uri: Optional[str] = None, draft: Optional[int] = None) -> SchemaNode:
    """
    Compile a decoded JSON Schema into a SchemaNode tree.

    Args:
        raw_schema: The decoded schema document.
        resolver: Optional callable loading referenced documents by URI.
        base_uri: Optional URI of the schema document.
        draft: Optional draft number (4, 6 or 7) overriding ``$schema``.

    Returns:
        SchemaNode: The compiled root node.
    """
    return SchemaCompiler(resolver=resolver, base_uri=base_uri, draft=draft).compile(raw_schema)

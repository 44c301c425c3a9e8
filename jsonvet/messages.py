"""Human-readable error message templates.

Messages are Jinja2 templates keyed by error kind, compiled when the module is
imported. The ``json`` filter renders schema and instance values as compact
JSON text.
"""

from typing import Any, Dict

import jinja2

from jsonvet.values import to_json

MESSAGES: Dict[str, str] = {
    'type-mismatch': 'Invalid type. Expected: {{ expected }}, given: {{ given }}',
    'required-missing': '{{ property }} is required',
    'additional-property-forbidden': 'Additional property {{ property }} is not allowed',
    'pattern-mismatch': "Does not match pattern '{{ pattern }}'",
    'format-mismatch': "Does not match format '{{ format }}'",
    'property-name-violation': 'Property name of "{{ property }}" does not match',
    'string-too-short': 'String length must be greater than or equal to {{ min }}',
    'string-too-long': 'String length must be less than or equal to {{ max }}',
    'array-too-short': 'Array must have at least {{ min }} items',
    'array-too-long': 'Array must have at most {{ max }} items',
    'object-too-small': 'Must have at least {{ min }} properties',
    'object-too-large': 'Must have at most {{ max }} properties',
    'uniqueness-violation': 'array items[{{ i }},{{ j }}] must be unique',
    'contains-violation': 'At least one of the items must match',
    'additional-item-forbidden': 'No additional items allowed on array',
    'minimum': 'Must be greater than or equal to {{ limit | json }}',
    'exclusive-minimum': 'Must be greater than {{ limit | json }}',
    'maximum': 'Must be less than or equal to {{ limit | json }}',
    'exclusive-maximum': 'Must be less than {{ limit | json }}',
    'multiple-of': 'Must be a multiple of {{ multiple | json }}',
    'enum-violation': 'Must be one of the following: {{ allowed | map("json") | join(", ") }}',
    'const-violation': 'Does not match: {{ allowed | json }}',
    'dependency-missing': 'Has a dependency on {{ dependency }}',
    'anyof-violation': 'Must validate at least one schema (anyOf)',
    'oneof-violation': 'Must validate one and only one schema (oneOf)',
    'allof-violation': 'Must validate all the schemas (allOf)',
    'not-violation': 'Must not validate the schema (not)',
    'condition-then-violation': 'Must validate "then" as "if" was valid',
    'condition-else-violation': 'Must validate "else" as "if" was not valid',
    'false-schema': 'False always fails validation',
}

_environment = jinja2.Environment(autoescape=False, undefined=jinja2.StrictUndefined)
_environment.filters['json'] = to_json

# compiled at import, read-only afterwards
TEMPLATES: Dict[str, jinja2.Template] = {key: _environment.from_string(text) for key, text in MESSAGES.items()}


def render_message(template_key: str, **details: Any) -> str:
    """Render the message template for an error with the given details.

    Raises:
        KeyError: If there is no template for ``template_key``.
    """
    return TEMPLATES[template_key].render(**details)

"""Constants for the jsonvet package."""

from typing import Any, Optional

DRAFT_4 = 4
DRAFT_6 = 6
DRAFT_7 = 7

# Instance nesting limit used by the command line tools
DEFAULT_MAX_DEPTH = 512


def detect_draft(schema_uri: Any) -> Optional[int]:
    """Returns the draft named by a ``$schema`` URI, or None when unknown."""
    if not isinstance(schema_uri, str):
        return None
    for draft in (DRAFT_4, DRAFT_6, DRAFT_7):
        if f'draft-0{draft}' in schema_uri:
            return draft
    return None

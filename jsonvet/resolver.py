"""Resolvers that turn a ``$ref`` document URI into a decoded schema document.

A resolver is any callable ``(uri: str) -> value``. The compiler calls it for
references that leave the current document and treats any exception it raises
as an unresolved reference.
"""

import json
import logging
import os
from typing import Any, Dict, Mapping
from urllib.parse import ParseResult, urldefrag, urlparse, unquote

import requests

logger = logging.getLogger(__name__)


class MappingResolver:
    """Serves schema documents from an in-memory mapping of URI to document."""

    def __init__(self, documents: Mapping[str, Any]):
        self.documents = {urldefrag(uri)[0]: document for uri, document in documents.items()}

    def __call__(self, uri: str) -> Any:
        document_uri = urldefrag(uri)[0]
        if document_uri not in self.documents:
            raise LookupError(f"No schema document registered for {document_uri}")
        return self.documents[document_uri]


class UrlResolver:
    """
    Fetches schema documents over HTTP(S) or from ``file`` URIs.

    Attributes:
    timeout: Seconds to wait for an HTTP response.
    import_map: Optional mapping of URI to a local file path that is used
        instead of fetching the URI.
    content_cache: Fetched document text by URL.
    """

    def __init__(self, timeout: float = 30, import_map: Dict[str, str] | None = None) -> None:
        self.timeout = timeout
        self.import_map = import_map if import_map is not None else {}
        self.content_cache: Dict[str, str] = {}

    def __call__(self, uri: str) -> Any:
        content = self.fetch_content(urldefrag(uri)[0])
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {uri}: {e}") from e

    def fetch_content(self, url: str | ParseResult) -> str:
        """
        Fetches the content from the specified URL.

        Args:
            url (str or ParseResult): The URL to fetch the content from.

        Returns:
            str: The fetched content.

        Raises:
            requests.RequestException: If there is an error while making the HTTP request.
            OSError: If there is an error while reading the file.
            NotImplementedError: If the URL scheme is not supported.
        """
        parsed_url = urlparse(url) if isinstance(url, str) else url
        key = parsed_url.geturl()
        if key in self.content_cache:
            return self.content_cache[key]

        if key in self.import_map:
            logger.debug("Loading %s from mapped file %s", key, self.import_map[key])
            with open(self.import_map[key], 'r', encoding='utf-8') as file:
                text = file.read()
            self.content_cache[key] = text
            return text

        scheme = parsed_url.scheme
        if scheme in ['http', 'https']:
            logger.debug("Fetching %s", key)
            response = requests.get(key, timeout=self.timeout)
            # Raises an HTTPError if the response status code is 4XX/5XX
            response.raise_for_status()
            self.content_cache[key] = response.text
            return response.text

        if scheme == 'file':
            file_path = unquote(parsed_url.netloc or parsed_url.path)
            if parsed_url.netloc and parsed_url.path:
                file_path = unquote(parsed_url.netloc + parsed_url.path)
            # On Windows, a file URL might start with a '/' but it's not part of the actual path
            if os.name == 'nt' and file_path.startswith('/'):
                file_path = file_path[1:]
            logger.debug("Reading %s", file_path)
            with open(file_path, 'r', encoding='utf-8') as file:
                text = file.read()
            self.content_cache[key] = text
            return text

        raise NotImplementedError(f'Unsupported URL scheme: {scheme}')


def file_uri(path: str) -> str:
    """Turn a local path into a ``file://`` URI usable as a base URI."""
    return 'file://' + os.path.abspath(path).replace(os.sep, '/')

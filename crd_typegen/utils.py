"""Utility functions for loading the source declaration document.

This module loads the declaration graph JSON from a local file, a
directory holding it, or an HTTP(S) URL, with proper error handling.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DOCUMENT_NAME = "declarations.json"


class SourceLoaderError(Exception):
    """Custom exception for source document loading errors."""

    pass


def is_url(locator: str) -> bool:
    return urlparse(locator).scheme in ("http", "https")


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Load JSON data from a local file or a directory containing one.

    Args:
        file_path: Path to the JSON file, or a directory holding
            ``declarations.json``.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        SourceLoaderError: If the file is missing, unreadable or invalid JSON.
    """
    file_path = Path(file_path)
    if file_path.is_dir():
        file_path = file_path / DEFAULT_DOCUMENT_NAME
    logger.debug("Attempting to load declarations from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise SourceLoaderError(f"File not found: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Loaded declarations from %s", file_path)
        return str(file_path), data
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in file %s: %s", file_path, e)
        raise SourceLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise SourceLoaderError(f"Error reading file {file_path}: {e}") from e


def load_json_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Load JSON data from a URL.

    Args:
        url: URL to fetch JSON from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        SourceLoaderError: If the request fails or the response isn't valid JSON.
    """
    logger.debug("Attempting to load declarations from URL: %s", url)

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        logger.info("Loaded declarations from %s", url)
        return url, data

    except requests.exceptions.Timeout as e:
        logger.error("Request timeout for URL: %s", url)
        raise SourceLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error %s for URL: %s", e.response.status_code, url)
        raise SourceLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.JSONDecodeError as e:
        logger.error("Invalid JSON response from URL %s: %s", url, e)
        raise SourceLoaderError(f"Invalid JSON response from URL {url}: {e}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e)
        raise SourceLoaderError(f"Request error for URL {url}: {e}") from e


def load_source(locator: str | Path, timeout: int = 30) -> tuple[str, Any]:
    """Load the declaration document from a path or URL.

    Args:
        locator: File path, directory, or http(s) URL.
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed JSON data).
    """
    if isinstance(locator, str) and is_url(locator):
        return load_json_from_url(locator, timeout)
    return load_json_from_file(locator)

"""Utility functions for ytscribe."""

import logging
import os
import re
from urllib.parse import parse_qs, urlparse

from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = re.compile(r'[：:？?＂"<>|*\\/]')
_WHITESPACE_RUN = re.compile(r'\s+')
_UNDERSCORE_RUN = re.compile(r'_+')
# Locale suffix left by yt-dlp, e.g. "Talk.en" from "Talk.en.vtt"
_LANGUAGE_SUFFIX = re.compile(r'\.\w{2}$')

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True) # Workers may race to create the shared temp dir
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def sanitize_filename(name: str) -> str:
    """
    Makes a video or channel title safe to use as a file or directory name.

    Drops characters that are invalid on common filesystems (including their
    full-width forms), turns whitespace runs into single underscores and trims
    underscores from both ends.

    Args:
        name: The raw title.

    Returns:
        The sanitized name. May be empty if nothing usable remains.
    """
    cleaned = _INVALID_FILENAME_CHARS.sub('', name)
    cleaned = _WHITESPACE_RUN.sub('_', cleaned)
    cleaned = _UNDERSCORE_RUN.sub('_', cleaned)
    return cleaned.strip('_').strip()

def derive_title(filename: str) -> str:
    """
    Derives a document title from a downloaded caption file name.

    Strips the file extension, then a trailing two-letter language code.
    "My Talk.en.vtt" becomes "My Talk".
    """
    base = os.path.basename(filename)
    stem, _ext = os.path.splitext(base)
    return _LANGUAGE_SUFFIX.sub('', stem)

def video_id_from_url(video_url: str) -> str:
    """Returns the ``v`` query parameter of a watch URL, else its last path segment."""
    parsed = urlparse(video_url)
    query_ids = parse_qs(parsed.query).get('v')
    if query_ids:
        return query_ids[0]
    segments = [segment for segment in parsed.path.split('/') if segment]
    if segments:
        return segments[-1]
    return video_url

"""Architect response parsing: overview text and the ordered file list.

Expected shape (everything else is tolerated):

    [OVERVIEW_START]
    markdown...
    [OVERVIEW_END]
    [FILE_LIST: ["a.py", "b.py"]]

Nothing here raises. Every failure resolves to a documented default.
"""

import json
import logging
import re
from dataclasses import dataclass

from config.defaults import DEFAULTS
from core.state import PlanResult
from utils.file_blocks import clean_name

logger = logging.getLogger(__name__)

PLACEHOLDER_OVERVIEW = "Project plan ready. Building files..."

_OVERVIEW_RE = re.compile(r"\[OVERVIEW_START\](.*?)\[OVERVIEW_END\]", re.DOTALL)
_FILE_LIST_RE = re.compile(r"\[\s*FILE_LIST\s*:")
_BARE_FILE_LIST_RE = re.compile(r"\bFILE_LIST\s*:")
_FENCE_MARKER_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedList:
    files: tuple[str, ...]


@dataclass(frozen=True)
class Fallback:
    reason: str


def extract_overview(text):
    """Return the trimmed overview section, or PLACEHOLDER_OVERVIEW."""
    match = _OVERVIEW_RE.search(text or "")
    if match:
        overview = match.group(1).strip()
        if overview:
            return overview
    return PLACEHOLDER_OVERVIEW


def _file_list_payload(text):
    """Return the raw payload of the FILE_LIST section, or None."""
    match = _FILE_LIST_RE.search(text)
    bracketed = match is not None
    if not bracketed:
        # a bare "FILE_LIST:" only counts when no bracketed marker exists
        match = _BARE_FILE_LIST_RE.search(text)
    if not match:
        return None
    payload = text[match.end():]
    if bracketed:
        # "[FILE_LIST: [...]]" - drop the section's own closing bracket
        close = payload.rfind("]")
        if close != -1:
            payload = payload[:close]
    return payload


def parse_file_list(text):
    """Parse the FILE_LIST section into ParsedList, or say why it fell back."""
    payload = _file_list_payload(text or "")
    if payload is None:
        return Fallback("no FILE_LIST section")

    payload = _FENCE_MARKER_RE.sub("", payload).strip()
    start = payload.find("[")
    end = payload.rfind("]")
    if start == -1 or end <= start:
        return Fallback("no bracketed array in FILE_LIST")

    # raw_decode stops at the array's own closing bracket, so stray "]"
    # in trailing prose cannot corrupt the slice
    try:
        data, _ = json.JSONDecoder().raw_decode(payload[start:end + 1])
    except json.JSONDecodeError as e:
        return Fallback(f"FILE_LIST is not valid JSON: {e.msg}")

    if not isinstance(data, list):
        return Fallback("FILE_LIST is not an array")

    files = []
    for item in data:
        if not isinstance(item, str):
            continue
        name = clean_name(item)
        if name and name not in files:
            files.append(name)

    if not files:
        return Fallback("FILE_LIST is empty")
    return ParsedList(tuple(files))


def extract_plan(text, fallback_files=None):
    """Build a PlanResult from an architect response. Never fails."""
    fallback_files = fallback_files or DEFAULTS["fallback_files"]
    overview = extract_overview(text)
    if overview == PLACEHOLDER_OVERVIEW:
        logger.warning("Architect response has no overview, using placeholder")

    parsed = parse_file_list(text)
    if isinstance(parsed, ParsedList):
        file_list = parsed.files
    else:
        logger.warning("Falling back to default file list: %s", parsed.reason)
        file_list = tuple(fallback_files)

    return PlanResult(overview_text=overview, file_list=file_list, raw_text=text or "")

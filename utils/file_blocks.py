"""File-block parser for builder responses.

Grammar, over the raw response text:

    response := (noise | block)*
    block    := START body [END]
    START    := "[FILE_START:" name "]"
    END      := "[FILE_END]"
    body     := any text up to the next START, END, or end of input

The END marker is optional: models often drop it or jump straight to the
next START. Text outside a block is noise and is ignored.
"""

import re

from core.state import FileArtifact

START = "start"
END = "end"
TEXT = "text"

_TOKEN_RE = re.compile(r"\[FILE_START:([^\]\n]*)\]|\[FILE_END\]")

# Leading ```lang line and trailing ``` line
_FENCE_OPEN_RE = re.compile(r"\A```[\w.+#-]*[ \t]*\r?\n")
_FENCE_CLOSE_RE = re.compile(r"(?:\A|\r?\n)```[ \t]*\Z")

# Markdown emphasis/heading debris models leave in file names
_NAME_JUNK_RE = re.compile(r"[*#`]")


def tokenize(text):
    """Split text into (kind, value) tokens. value is the name for START."""
    tokens = []
    pos = 0
    for match in _TOKEN_RE.finditer(text):
        if match.start() > pos:
            tokens.append((TEXT, text[pos:match.start()]))
        if match.group(0) == "[FILE_END]":
            tokens.append((END, ""))
        else:
            tokens.append((START, match.group(1)))
        pos = match.end()
    if pos < len(text):
        tokens.append((TEXT, text[pos:]))
    return tokens


def clean_name(name):
    """Strip whitespace and stray markdown punctuation from a file name."""
    return _NAME_JUNK_RE.sub("", name).strip().strip("\"'").strip()


def strip_fences(content):
    """Remove a decorative ```lang ... ``` wrapper around a block body.

    The closing fence is only removed when an opening one was, so a file
    that merely ends with a code sample keeps it.
    """
    content = content.strip()
    unwrapped, opened = _FENCE_OPEN_RE.subn("", content, count=1)
    if not opened:
        return content
    return _FENCE_CLOSE_RE.sub("", unwrapped, count=1).strip()


def parse_files(response):
    """Extract FileArtifacts from a builder response, in order of appearance.

    Blocks whose name or body is empty after cleaning are dropped.
    Returns [] when no START marker is present.
    """
    files = []
    current = None
    body = []

    def close():
        if current is None:
            return
        name = clean_name(current)
        content = strip_fences("".join(body))
        if name and content:
            files.append(FileArtifact(name=name, content=content))

    for kind, value in tokenize(response or ""):
        if kind == START:
            close()
            current, body = value, []
        elif kind == END:
            close()
            current, body = None, []
        elif current is not None:
            body.append(value)
    close()
    return files

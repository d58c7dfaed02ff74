"""Zip archive builder for generated projects."""

import io
import posixpath
import zipfile


class ArchiveError(ValueError):
    """An artifact cannot be placed inside the archive."""


def safe_member_name(name):
    """Normalize an artifact name to a relative archive path, or raise."""
    cleaned = name.replace("\\", "/").strip()
    normalized = posixpath.normpath(cleaned) if cleaned else ""
    if not normalized or normalized == ".":
        raise ArchiveError(f"Empty file name in artifact: {name!r}")
    if normalized.startswith("/") or normalized == ".." or normalized.startswith("../"):
        raise ArchiveError(f"Path escapes project root: {name}")
    return normalized


def build_archive(artifacts):
    """Return zip bytes containing every artifact. Later duplicates win."""
    members = {}
    for artifact in artifacts:
        members[safe_member_name(artifact.name)] = artifact.content

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path, content in members.items():
            zf.writestr(path, content.encode("utf-8"))
    return buffer.getvalue()

"""Ownership marker for files generated by vpm.

Every startup file vpm writes begins with a fixed Vim comment line. A file
that starts with this exact byte sequence is owned by vpm and may be replaced
on the next build; any other file at a managed location belongs to the user.

Marker Format:
    " NOTE: this file was generated by vpm. please modify original file.

The byte sequence must never change: files written by earlier builds are
recognized by it. Files written by volt, which used the same line with its own
name, are recognized too.
"""

from __future__ import annotations

from pathlib import Path

MAGIC_COMMENT = b'" NOTE: this file was generated by vpm. please modify original file.\n'
LEGACY_MAGIC_COMMENTS = (
    b'" NOTE: this file was generated by volt. please modify original file.\n',
)

_ACCEPTED = (MAGIC_COMMENT, *LEGACY_MAGIC_COMMENTS)


def has_magic_comment(path: Path) -> bool:
    """Check whether a file starts with the ownership marker.

    Both the current marker and the legacy volt marker are accepted. A
    short read counts as a mismatch.

    Args:
        path: Path to the file

    Returns:
        True if the file begins with the marker

    Raises:
        OSError: If the file cannot be opened
    """
    with open(path, "rb") as f:
        head = f.read(max(len(m) for m in _ACCEPTED))
    return any(head.startswith(m) for m in _ACCEPTED)


def write_with_magic_comment(src: Path, dest: Path) -> None:
    """Write the marker line followed by the verbatim bytes of a source file.

    Args:
        src: File whose content is copied after the marker
        dest: File to create (truncated if it exists)
    """
    with open(src, "rb") as reader, open(dest, "wb") as writer:
        writer.write(MAGIC_COMMENT)
        for chunk in iter(lambda: reader.read(8192), b""):
            writer.write(chunk)

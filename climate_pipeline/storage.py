"""
Whole-file writes for the dataset artifact and map images.
"""

from __future__ import annotations

from pathlib import Path


class ArtifactWriteError(OSError):
    """
    Raised when an output file could not be replaced.
    """


def write_atomic(path: str | Path, content: bytes) -> Path:
    """
    Write `content` to a sibling temp file, then swap it into place.

    Readers see either the previous file or the complete new one.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(f".{target.name}.tmp")
    try:
        with tmp_path.open("wb") as handle:
            handle.write(content)
        tmp_path.replace(target)
    except OSError as exc:
        raise ArtifactWriteError(f"Failed to write {target}: {exc}") from exc
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return target


def write_atomic_text(path: str | Path, text: str) -> Path:
    return write_atomic(path, text.encode("utf-8"))

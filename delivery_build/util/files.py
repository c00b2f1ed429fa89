"""
File utility functions.
"""

import hashlib
import os
from pathlib import Path


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def write_text(path: str | Path, content: str, mode: int | None = None) -> None:
    """Write text to file, creating parent directories if needed.

    When ``mode`` is given the file is created with those permissions so that
    secrets never sit on disk world-readable.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if mode is None:
        p.write_text(content)
        return
    fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    os.chmod(p, mode)


def force_symlink(target: str | Path, link: str | Path) -> Path:
    """Point ``link`` at ``target``, replacing an existing link."""
    link = Path(link)
    if link.is_symlink() or link.exists():
        if link.is_symlink() and os.readlink(link) == str(target):
            return link
        link.unlink()
    link.symlink_to(target)
    return link


def sha256_file(path: str | Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()

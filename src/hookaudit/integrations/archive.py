"""Read install hooks out of package archives.

Packages are tar archives (any compression `tarfile` understands) that
carry the hook script as a `.INSTALL` member at the archive root.
"""

import logging
import sys
import tarfile
from pathlib import Path
from typing import Optional, Union

from hookaudit.exceptions import ArchiveError

logger = logging.getLogger(__name__)

INSTALL_MEMBER = ".INSTALL"
INSTALL_MEMBER_NAMES = (INSTALL_MEMBER, f"./{INSTALL_MEMBER}")

PathLike = Union[str, Path]


def read_install_hook(path: PathLike) -> str:
    """Extract and decode the install hook of a package archive.

    Args:
        path: Package archive

    Returns:
        Hook script text (invalid UTF-8 replaced)

    Raises:
        ArchiveError: If the file is not a readable tar archive or has no
            `.INSTALL` member
    """
    try:
        with tarfile.open(path, mode="r:*") as archive:
            member = _find_install_member(archive)
            if member is None:
                raise ArchiveError(f"Archive has no {INSTALL_MEMBER} member", archive_path=str(path))
            stream = archive.extractfile(member)
            if stream is None:
                raise ArchiveError(f"{INSTALL_MEMBER} is not a regular file", archive_path=str(path))
            with stream:
                data = stream.read()
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveError(f"Failed to read package archive ({e})", archive_path=str(path)) from e

    logger.debug(f"Read {len(data)} byte install hook from {path}")
    return data.decode("utf-8", errors="replace")


def _find_install_member(archive: tarfile.TarFile) -> Optional[tarfile.TarInfo]:
    for name in INSTALL_MEMBER_NAMES:
        try:
            return archive.getmember(name)
        except KeyError:
            continue
    return None


def load_script(path: PathLike) -> str:
    """Load a hook script from stdin (`-`), a package archive, or a plain file.

    Raises:
        ArchiveError: If an archive has no readable install hook
        OSError: If a plain file cannot be read
    """
    if str(path) == "-":
        return sys.stdin.read()

    path = Path(path)
    if path.is_file() and tarfile.is_tarfile(path):
        logger.info(f"Reading install hook from archive: {path}")
        return read_install_hook(path)

    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()

"""
Packs exercises for submission and unpacks downloaded exercise archives.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Protocol

from tmc_core.exceptions import FilesystemError

log = logging.getLogger(__name__)


class Archiver(Protocol):
    """Turns an exercise directory into bytes and back."""

    def pack(self, root: Path) -> bytes: ...

    def extract(self, payload: bytes, destination: Path) -> None: ...


class ZipArchiver:
    """Zip implementation of the Archiver protocol."""

    def pack(self, root: Path) -> bytes:
        """
        Zips every file under ``root``. Entry names start with the root's own
        directory name, matching the layout of downloaded archives.
        """
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(root.rglob("*")):
                if path.is_file() and not path.is_symlink():
                    zf.write(path, (Path(root.name) / path.relative_to(root)).as_posix())
        log.debug(f"Packed '{root}' into {buffer.tell()} bytes.")
        return buffer.getvalue()

    def extract(self, payload: bytes, destination: Path) -> None:
        """
        Unpacks a zip payload into ``destination``.

        Raises:
            FilesystemError: If the payload is not a valid zip or an entry would
            land outside ``destination``.
        """
        destination = destination.resolve()
        try:
            with zipfile.ZipFile(io.BytesIO(payload)) as zf:
                for member in zf.infolist():
                    target = (destination / member.filename).resolve()
                    if target != destination and destination not in target.parents:
                        raise FilesystemError(
                            f"Archive entry '{member.filename}' escapes the "
                            "extraction directory."
                        )
                zf.extractall(destination)
        except zipfile.BadZipFile as e:
            raise FilesystemError(f"Invalid exercise archive: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Failed to extract archive: {e}") from e

"""Text file checkpoint store."""

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional, Union

from ..exceptions import CheckpointError
from .base import CheckpointStore


def _fsync_directory(directory: Path) -> None:
    # Persists the rename itself
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class FileCheckpointStore(CheckpointStore):
    """Keeps the checkpoint in a two-line text file."""

    def __init__(self, path: Union[str, Path], start_date: date):
        super().__init__(start_date)
        self.path = Path(path)

    def _read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CheckpointError(f"Cannot read checkpoint file {self.path}: {e}") from e

    def _write(self, content: str) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            # Write next to the target, then rename over it
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
            _fsync_directory(directory)
        except OSError as e:
            raise CheckpointError(f"Cannot write checkpoint file {self.path}: {e}") from e

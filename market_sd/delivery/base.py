"""Base classes for monitoring output writers."""

import fcntl
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import structlog

from ..errors import OutputWriteError


@dataclass(frozen=True)
class WriteResult:
    """Result of writing one output file."""
    path: Path
    lines: int


class BaseOutputWriter(ABC):
    """Base class for file-based monitoring outputs."""

    def __init__(self, name: str, output_dir: Union[str, Path], create_dirs: bool = True):
        self.name = name
        self.output_dir = Path(output_dir)
        self.create_dirs = create_dirs
        self.logger = structlog.get_logger(f"market_sd.delivery.{name}")
        self._write_count = 0

    @abstractmethod
    def describe(self) -> str:
        """Short description of what this writer produces."""
        pass

    def write_lines(self, path: Path, lines: Sequence[str]) -> WriteResult:
        """
        Replace a file's contents with the given lines.

        Raises:
            OutputWriteError: On any file system error
        """
        try:
            if self.create_dirs:
                path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                for line in lines:
                    f.write(line)
                    f.write("\n")
        except OSError as e:
            self.logger.error(
                "Output write failed",
                writer=self.name,
                output_path=str(path),
                error=str(e)
            )
            raise OutputWriteError(f"Cannot write {path}: {e}", output_path=str(path)) from e

        self._write_count += 1
        return WriteResult(path=path, lines=len(lines))

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            test_file = self.output_dir / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True

        except OSError as e:
            self.logger.warning(
                "Health check failed",
                writer=self.name,
                error=str(e)
            )
            return False

    @property
    def write_count(self) -> int:
        return self._write_count

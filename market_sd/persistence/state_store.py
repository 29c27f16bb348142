"""Previous-state persistence as a simple ``id=1|0`` properties file."""

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Union

import structlog

from ..errors import PersistenceError
from ..utils.time import utc_now

TRUE_VALUES = ("1", "true")


class StateStore:
    """File-backed map of market id to last known OPEN/CLOSED state."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = structlog.get_logger(__name__).bind(state_file=str(self.path))

    def load(self) -> dict[str, bool]:
        """
        Read the persisted states.

        A missing file means no state has ever been recorded. An unreadable
        file is logged and treated the same way.

        Returns:
            Mapping of market id to last known state
        """
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning("Cannot read previous state", error=str(e))
            return {}

        states = {}
        for line in lines:
            text = line.strip()
            if not text or text.startswith(("#", "!")):
                continue
            key, sep, value = text.partition("=")
            if not sep or not key.strip():
                continue
            states[key.strip()] = value.strip().lower() in TRUE_VALUES
        return states

    def save(self, states: dict[str, bool]) -> None:
        """
        Persist states atomically.

        Raises:
            PersistenceError: If the file cannot be written
        """
        lines = [f"# market state {utc_now().isoformat()}"]
        lines.extend(f"{key}={1 if value else 0}" for key, value in sorted(states.items()))
        payload = "\n".join(lines) + "\n"

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(
                f"Cannot persist previous state: {e}",
                operation="save",
                target=str(self.path)
            ) from e

        self.logger.info("Persisted market state", markets=len(states))

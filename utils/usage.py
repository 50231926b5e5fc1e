import json
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict

from utils.logger import logger

# Shared by every UsageStats instance in the process.
_LOCK = threading.Lock()


class UsageStats:
    """
    A small JSON file recording how many commit messages were generated.

    One instance is created at startup and handed to the pipeline; it is
    never torn down explicitly.
    """

    def __init__(self, path: str, enabled: bool = True):
        self.path = Path(path).expanduser()
        self.enabled = enabled

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (IOError, json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read usage file {self.path}: {e}")
            return {}

    @property
    def hits(self) -> int:
        """The number of successful generations recorded so far."""
        try:
            return int(self._read().get("hits", 0))
        except (TypeError, ValueError):
            return 0

    def record_hit(self) -> int:
        """
        Atomically increments the hit counter and persists it.

        Returns:
            The new number of hits.
        """
        if not self.enabled:
            return self.hits

        with _LOCK:
            data = self._read()
            try:
                hits = int(data.get("hits", 0)) + 1
            except (TypeError, ValueError):
                hits = 1
            data.update({"hits": hits, "last_hit": time.time()})

            tmp_file = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_file, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_file, self.path)
                logger.debug(f"Recorded usage hit #{hits} in {self.path}")
            except (IOError, OSError) as e:
                logger.warning(f"Could not write usage file {self.path}: {e}")
            return hits

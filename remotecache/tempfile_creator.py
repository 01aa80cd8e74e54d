"""Creation of uniquely named temporary cache files."""

from __future__ import annotations

import os
import stat
import threading
import time
from typing import BinaryIO, Optional

# Permissions of cache files once they have been completely written.
FINAL_MODE = 0o664

# Permissions of files still being written; setgid marks them incomplete.
WIP_MODE = FINAL_MODE | stat.S_ISGID

_OPEN_FLAGS = os.O_RDWR | os.O_CREAT | os.O_EXCL
_MAX_ATTEMPTS = 10000


class TempfileCreator:
    """Creates temp files named <base>-<random>, using a fast LCG for names."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns()
        self._lock = threading.Lock()
        self._state = seed & 0xFFFFFFFF

    def random_suffix(self) -> str:
        """Return the next nine-digit pseudo-random string."""
        with self._lock:
            self._state = (self._state * 1664525 + 1013904223) & 0xFFFFFFFF
            value = self._state
        return str(1_000_000_000 + value % 1_000_000_000)[1:]

    def create(self, base: str, legacy: bool = False) -> tuple[BinaryIO, str]:
        """Create and open a new file named <base>-<random>, plus ".v1" if legacy.

        The file is created with the setgid bit set to mark it incomplete;
        chmod it to FINAL_MODE once written. Returns the open binary file
        and the random string.
        """
        for _ in range(_MAX_ATTEMPTS):
            random = self.random_suffix()
            name = f"{base}-{random}.v1" if legacy else f"{base}-{random}"
            try:
                handle = open(
                    name,
                    "w+b",
                    opener=lambda path, _flags: os.open(path, _OPEN_FLAGS, WIP_MODE),
                )
            except FileExistsError:
                continue
            except OSError as err:
                raise OSError(f"unexpected error opening temp file: {err}") from err
            return handle, random
        raise OSError("failed to create a temp file")
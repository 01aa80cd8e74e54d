"""Raising the limit on the number of open files."""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Optional

try:
    import resource
except ImportError:  # not available on Windows
    resource = None  # type: ignore[assignment]

_log = logging.getLogger(__name__)

_SYSCTL = ["/usr/sbin/sysctl", "-n", "kern.maxfilesperproc"]


def _darwin_max_files() -> Optional[int]:
    try:
        result = subprocess.run(_SYSCTL, capture_output=True, text=True, check=True)
    except (OSError, subprocess.SubprocessError) as err:
        _log.warning("Failed to find rlimit from sysctl: %s", err)
        return None
    try:
        value = int(result.stdout.strip("\n"))
    except ValueError as err:
        _log.warning("Failed to parse rlimit from sysctl: %s", err)
        return None
    if value < 0:
        _log.warning("Failed to parse rlimit from sysctl: negative value %d", value)
        return None
    return value


def raise_open_file_limit() -> Optional[tuple[int, int]]:
    """Raise the soft RLIMIT_NOFILE to the hard limit.

    On macOS the hard limit is capped by kern.maxfilesperproc. Returns the
    (soft, hard) limits that were set, or None if they could not be changed.
    """
    if resource is None:
        _log.warning("Raising the open file limit is not supported on this platform")
        return None

    try:
        _soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError) as err:
        _log.warning("Failed to find rlimit from getrlimit: %s", err)
        return None

    if sys.platform == "darwin":
        sysctl_max = _darwin_max_files()
        if sysctl_max is None:
            return None
        if hard == resource.RLIM_INFINITY or hard > sysctl_max:
            hard = sysctl_max

    _log.info("Initial RLIMIT_NOFILE cur: %d max: %d", _soft, hard)
    _log.info("Setting RLIMIT_NOFILE cur: %d max: %d", hard, hard)

    try:
        resource.setrlimit(resource.RLIMIT_NOFILE, (hard, hard))
    except (OSError, ValueError) as err:
        _log.warning("Failed to set rlimit: %s", err)
        return None
    return hard, hard
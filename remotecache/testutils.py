"""Helpers for producing test blobs and quiet loggers."""

from __future__ import annotations

import hashlib
import logging
import os

from remotecache.models import Digest

_SILENT_LOGGER_NAME = "remotecache.silent"


def random_data_and_hash(size: int) -> tuple[bytes, str]:
    """Return `size` random bytes and their hex SHA256 hash."""
    data = os.urandom(size)
    return data, hashlib.sha256(data).hexdigest()


def random_data_and_digest(size: int) -> tuple[bytes, Digest]:
    """Return `size` random bytes and their Digest."""
    data, hash_ = random_data_and_hash(size)
    return data, Digest(hash_, size)


def silent_logger() -> logging.Logger:
    """Return a logger that discards everything."""
    logger = logging.getLogger(_SILENT_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger
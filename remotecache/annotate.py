"""Adding context to errors."""

from __future__ import annotations

from typing import Optional, Union


class AnnotatedError(Exception):
    """An error with a prefix and, optionally, the reason its operation was cancelled."""

    def __init__(
        self,
        prefix: str,
        error: BaseException,
        cancelled_reason: Optional[Union[str, BaseException]] = None,
    ):
        self.prefix = prefix
        self.error = error
        self.cancelled_reason = cancelled_reason
        if cancelled_reason is None:
            message = f"{prefix}: {error}"
        else:
            message = f"{prefix}: {error} ({cancelled_reason})"
        super().__init__(message)
        self.__cause__ = error


def annotate_error(
    prefix: str,
    error: BaseException,
    cancelled_reason: Optional[Union[str, BaseException]] = None,
) -> AnnotatedError:
    """Wrap error with prefix, noting cancelled_reason if the operation was cancelled."""
    return AnnotatedError(prefix, error, cancelled_reason)
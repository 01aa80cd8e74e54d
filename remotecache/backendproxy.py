"""A bounded queue of uploads to a proxy backend, drained by worker threads."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from remotecache.models import EntryKind

_log = logging.getLogger(__name__)


@dataclass
class UploadRequest:
    """A blob to upload to a backend."""

    hash: str
    logical_size: int
    size_on_disk: int
    kind: EntryKind
    reader: BinaryIO


class UploadQueue:
    """Uploads submitted requests on a fixed number of background threads."""

    def __init__(
        self,
        upload_file: Callable[[UploadRequest], None],
        num_uploaders: int,
        max_queued_uploads: int,
    ):
        self._upload_file = upload_file
        self._queue: queue.Queue[UploadRequest] = queue.Queue(maxsize=max_queued_uploads)
        self._workers = [
            threading.Thread(target=self._work, name=f"uploader-{n}", daemon=True)
            for n in range(num_uploaders)
        ]
        for worker in self._workers:
            worker.start()

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            try:
                self._upload_file(item)
            except Exception:
                _log.exception("upload of %s/%s failed", item.kind, item.hash)
            finally:
                self._queue.task_done()

    def submit(self, item: UploadRequest) -> bool:
        """Queue item for upload; return False, skipping it, if the queue is full."""
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            return False
        return True

    def join(self) -> None:
        """Block until every submitted item has been uploaded."""
        self._queue.join()


def start_uploaders(
    upload_file: Callable[[UploadRequest], None],
    num_uploaders: int,
    max_queued_uploads: int,
) -> Optional[UploadQueue]:
    """Start num_uploaders threads calling upload_file; None if either count is not positive."""
    if max_queued_uploads <= 0 or num_uploaders <= 0:
        return None
    return UploadQueue(upload_file, num_uploaders, max_queued_uploads)
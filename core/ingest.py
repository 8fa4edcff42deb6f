from __future__ import annotations

import io
import logging
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Tuple

from core.collection import VisageCollection
from core.io import DecodeError, decode_image_rgba
from core.surface import PixelSurface
from core.visage import Visage


logger = logging.getLogger(__name__)

Decoder = Callable[[BinaryIO], PixelSurface]


class IngestError(RuntimeError):
    pass


def iter_dropped_files(paths: Iterable[str]) -> Iterator[Path]:
    """Yield every file under the dropped paths; directories are walked in lexical order."""
    for raw in paths:
        root = Path(raw)
        if not root.is_dir():
            yield root
            continue

        def _raise(err: OSError) -> None:
            raise err

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                yield Path(dirpath) / name


class ImageIngest:
    """
    Decodes dropped files off the interactive thread.

    Each batch is walked on a worker; every file is read there and decoded as
    its own task. Decoded surfaces go into a thread-safe queue that the frame
    loop drains with `drain_into()`. A walk/open failure aborts the rest of
    its batch and is kept in a one-slot error box (first error wins); a file
    that fails to decode is logged and skipped.
    """

    def __init__(
        self,
        decoder: Decoder = decode_image_rgba,
        origin: Tuple[int, int] = (40, 40),
        max_workers: Optional[int] = None,
    ):
        self._decoder = decoder
        self._origin = origin
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="visage-ingest")
        self._results: "queue.Queue[Tuple[str, PixelSurface]]" = queue.Queue()
        self._lock = threading.Lock()
        self._error: Optional[IngestError] = None
        self._futures: List[Future] = []

    # ---- Worker side ----

    def submit(self, paths: Iterable[str]) -> Future:
        batch = list(paths)
        fut = self._executor.submit(self._walk_batch, batch)
        self._track(fut)
        return fut

    def _track(self, fut: Future) -> None:
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(fut)

    def _walk_batch(self, paths: List[str]) -> int:
        submitted = 0
        try:
            for path in iter_dropped_files(paths):
                size = path.stat().st_size
                logger.info("Name: %s, Size: %d", path.name, size)
                with open(path, "rb") as f:
                    data = f.read()
                self._track(self._executor.submit(self._decode_one, path.name, data))
                submitted += 1
        except OSError as e:
            self._record_error(IngestError(f"Failed to read dropped files: {e}"), e)
        return submitted

    def _decode_one(self, name: str, data: bytes) -> bool:
        try:
            surface = self._decoder(io.BytesIO(data))
        except DecodeError as e:
            logger.warning("Failed to decode the image file %s: %s", name, e)
            return False
        self._results.put((name, surface))
        return True

    def _record_error(self, err: IngestError, cause: BaseException) -> None:
        err.__cause__ = cause
        logger.error("%s", err)
        with self._lock:
            if self._error is None:
                self._error = err

    # ---- Interactive side ----

    def pending_error(self) -> Optional[IngestError]:
        with self._lock:
            return self._error

    def raise_pending_error(self) -> None:
        err = self.pending_error()
        if err is not None:
            raise err

    def drain_into(self, collection: VisageCollection) -> int:
        """Append decoded images as new front-most visages. Never blocks."""
        if not self._lock.acquire(blocking=False):
            return 0
        added = 0
        try:
            while True:
                try:
                    name, surface = self._results.get_nowait()
                except queue.Empty:
                    break
                collection.insert_front(Visage.at_natural_size(surface, *self._origin))
                added += 1
                logger.debug("Added visage %s (%dx%d)", name, surface.width, surface.height)
        finally:
            self._lock.release()
        return added

    def wait(self, timeout: Optional[float] = None) -> None:
        # Batches submit their decode tasks while running, so re-check until settled.
        while True:
            with self._lock:
                pending = [f for f in self._futures if not f.done()]
            if not pending:
                return
            done, not_done = wait(pending, timeout=timeout)
            if not_done:
                return

    def shutdown(self, wait_for_tasks: bool = False) -> None:
        self._executor.shutdown(wait=wait_for_tasks)

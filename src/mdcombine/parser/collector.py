"""Directory walker that reads documents under bounded concurrency."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from mdcombine.models.document import (
    ALL_EXTENSIONS,
    MARKDOWN_EXTENSION,
    SOURCE_EXTENSION,
    TEMPLATE_EXTENSION,
    Document,
    has_extension,
)
from mdcombine.models.errors import CollectionCancelledError, InputError

logger = logging.getLogger("mdcombine.collector")


class DocumentCollector:
    """Collects documents from a directory tree.

    Files are enumerated lazily and each read is scheduled as soon as its path
    is seen.  At most ``max_workers`` reads run at once (defaults to the number
    of logical processors).  A file that cannot be read is still returned, with
    empty content; only an invalid root directory is fatal.
    """

    def __init__(self, max_workers: int | None = None, encoding: str = "utf-8") -> None:
        self._max_workers = max_workers or os.cpu_count() or 1
        self._encoding = encoding

    @property
    def max_workers(self) -> int:
        return self._max_workers

    # -- public API ----------------------------------------------------------

    def collect_all(
        self, root_dir: str | Path, cancel: threading.Event | None = None
    ) -> list[Document]:
        """Collect every ``.md``, ``.mdext`` and ``.mdsrc`` file under ``root_dir``."""
        documents = self.collect(root_dir, ALL_EXTENSIONS, cancel)
        logger.info(
            "Collected %d markdown files (%d .md, %d .mdext, %d .mdsrc) from: %s",
            len(documents),
            sum(1 for d in documents if has_extension(d.name, MARKDOWN_EXTENSION)),
            sum(1 for d in documents if has_extension(d.name, TEMPLATE_EXTENSION)),
            sum(1 for d in documents if has_extension(d.name, SOURCE_EXTENSION)),
            root_dir,
        )
        return documents

    def collect(
        self,
        root_dir: str | Path,
        extensions: Iterable[str],
        cancel: threading.Event | None = None,
    ) -> list[Document]:
        """Read all files under ``root_dir`` whose name ends with one of ``extensions``.

        Raises ``InputError`` for an empty or missing root and
        ``CollectionCancelledError`` once ``cancel`` is observed set.  Reads that
        already started are allowed to finish; pending ones are dropped.
        """
        root = self._validate_root(root_dir)
        wanted = tuple(ext.lower() for ext in extensions)
        semaphore = threading.BoundedSemaphore(self._max_workers)
        futures: list[Future[Document]] = []

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="mdcombine-read"
        ) as executor:
            for path in self._iter_files(root, wanted):
                if cancel is not None and cancel.is_set():
                    dropped = sum(1 for f in futures if f.cancel())
                    logger.info(
                        "Collection cancelled after scheduling %d reads (%d dropped): %s",
                        len(futures), dropped, root,
                    )
                    raise CollectionCancelledError(f"Collection cancelled: {root}")
                futures.append(executor.submit(self._read, path, root, semaphore))

            logger.debug(
                "Found %d files with extensions [%s] in: %s",
                len(futures), ", ".join(wanted), root,
            )
            documents = [future.result() for future in futures]

        logger.info(
            "Successfully collected %d files with extensions [%s] from: %s",
            len(documents), ", ".join(wanted), root,
        )
        return documents

    # -- internals -----------------------------------------------------------

    @staticmethod
    def _validate_root(root_dir: str | Path) -> Path:
        if root_dir is None or not str(root_dir).strip():
            raise InputError("Directory path cannot be null or empty")
        root = Path(root_dir)
        if not root.is_dir():
            raise InputError(f"Directory not found: {root_dir}")
        return root

    @staticmethod
    def _iter_files(root: Path, extensions: tuple[str, ...]) -> Iterator[Path]:
        """Yield matching files depth-first, in sorted order within each directory."""

        def _on_error(exc: OSError) -> None:
            logger.warning("Cannot list directory %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if any(has_extension(filename, ext) for ext in extensions):
                    yield Path(dirpath) / filename

    def _read(self, path: Path, root: Path, semaphore: threading.BoundedSemaphore) -> Document:
        relative = path.relative_to(root).as_posix()
        with semaphore:
            logger.debug("Reading file: %s", path)
            try:
                with path.open("r", encoding=self._encoding, newline="") as handle:
                    content = handle.read()
            except (OSError, UnicodeError) as exc:
                logger.error("Error reading file: %s", path, exc_info=exc)
                content = ""
        return Document(name=relative, path=relative, content=content)

"""Persist resolved documents below an output directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from mdcombine.models.document import Document
from mdcombine.models.errors import WriteError

logger = logging.getLogger("mdcombine.writer")


class DocumentWriter:
    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def write_all(self, documents: Iterable[Document], output_dir: str | Path) -> list[Path]:
        """Write each document to ``output_dir / document.path``.

        Raises ``WriteError`` on the first file or directory that cannot be
        written.
        """
        if not str(output_dir).strip():
            raise WriteError("Output folder cannot be empty or whitespace")
        root = Path(output_dir)
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"Unable to create output directory: {root}") from exc

        document_list = list(documents)
        logger.info("Starting to write %d documents to folder: %s", len(document_list), root)
        written: list[Path] = []
        for document in document_list:
            if not document.path.strip():
                logger.warning("Skipping document with empty filename")
                continue
            target = root / document.path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                with target.open("w", encoding=self._encoding, newline="") as handle:
                    handle.write(document.content)
            except OSError as exc:
                logger.error("Failed to write file: %s", target, exc_info=exc)
                raise WriteError(f"Failed to write file: {target}") from exc
            logger.debug("Successfully wrote document to: %s", target)
            written.append(target)

        logger.info("Successfully wrote %d documents to folder: %s", len(written), root)
        return written

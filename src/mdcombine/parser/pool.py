"""Case-insensitive source pool keyed by document name."""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable

from mdcombine.models.document import Document, normalize_key

logger = logging.getLogger("mdcombine.engine")


class SourcePool:
    """Name → source document mapping built once per engine/validator run.

    Keys are compared case-insensitively.  When two sources share a name that
    differs only in case, the one processed last is kept.
    """

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[str, Document] = {}
        for doc in documents:
            key = doc.key
            previous = self._documents.get(key)
            if previous is not None and previous.name != doc.name:
                logger.debug(
                    "Source name collision: '%s' replaces '%s'", doc.name, previous.name
                )
            self._documents[key] = doc

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_key(name) in self._documents

    @property
    def names(self) -> list[str]:
        return [doc.name for doc in self._documents.values()]

    def get(self, name: str) -> Document | None:
        """Exact (case-insensitive) lookup of ``name``."""
        return self._documents.get(normalize_key(name))

    def lookup(self, name: str, template_path: str | None = None) -> Document | None:
        """Resolve a directive target.

        ``name`` is tried as given first; if that fails and the template lives
        in a subdirectory, ``name`` is tried relative to that directory.
        """
        key = normalize_key(name)
        if not key:
            return None
        doc = self._documents.get(key)
        if doc is not None or not template_path:
            return doc
        template_dir = posixpath.dirname(normalize_key(template_path))
        if not template_dir:
            return None
        relative = posixpath.normpath(posixpath.join(template_dir, key))
        return self._documents.get(relative)

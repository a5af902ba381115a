"""Document value type and the file-role extensions it is categorised by."""

from __future__ import annotations

import posixpath

from pydantic import BaseModel, ConfigDict, field_validator

TEMPLATE_EXTENSION = ".mdext"
SOURCE_EXTENSION = ".mdsrc"
MARKDOWN_EXTENSION = ".md"

# Canonical extension given to every resolved template.
OUTPUT_EXTENSION = MARKDOWN_EXTENSION

ALL_EXTENSIONS: tuple[str, ...] = (MARKDOWN_EXTENSION, TEMPLATE_EXTENSION, SOURCE_EXTENSION)


def has_extension(name: str, extension: str) -> bool:
    """Case-insensitive suffix match (``.MD`` counts as ``.md``)."""
    return name.lower().endswith(extension.lower())


def with_extension(name: str, extension: str) -> str:
    """Replace the last suffix of ``name``, keeping its directory part."""
    root, _ = posixpath.splitext(name)
    return root + extension


def normalize_key(name: str) -> str:
    """Lookup key for a document name or directive target.

    Separators are unified to ``/``, a leading ``./`` is dropped and the
    result is lower-cased so that keys compare case-insensitively.
    """
    if not name or not name.strip():
        return ""
    key = name.strip().replace("\\", "/")
    while key.startswith("./"):
        key = key[2:]
    return key.lower()


class Document(BaseModel):
    """A named unit of text content plus its origin path.

    ``name`` and ``path`` are relative to the collection root and use ``/``
    separators.  Instances are frozen; transformations build new documents.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def _content_never_none(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def key(self) -> str:
        return normalize_key(self.name)

    @property
    def is_template(self) -> bool:
        return has_extension(self.name, TEMPLATE_EXTENSION)

    @property
    def is_source(self) -> bool:
        return has_extension(self.name, SOURCE_EXTENSION)

    @property
    def is_markdown(self) -> bool:
        return has_extension(self.name, MARKDOWN_EXTENSION)

    def as_output(self, content: str | None = None) -> Document:
        """Return the output document for this template.

        The name and path get the canonical output extension; ``content``
        defaults to this document's own content.
        """
        return Document(
            name=with_extension(self.name, OUTPUT_EXTENSION),
            path=with_extension(self.path, OUTPUT_EXTENSION),
            content=self.content if content is None else content,
        )

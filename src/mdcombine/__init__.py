"""mdcombine: insert-directive resolution and validation for markdown fragments."""

__version__ = "0.3.0"

"""Keeps public and private talk search indices in sync with moresleep."""

__version__ = "0.1.0"

#!/usr/bin/env python3
"""
KUBECHECKSUM ERRORS
-------------------
Fatal errors abort the whole run before anything is written.
DecodeError is the only recoverable one: the offending document is
passed through untouched.
"""

from typing import Optional


class KubeChecksumError(Exception):
    """Base class for every error raised by the injector."""


class InvalidModeError(KubeChecksumError):
    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"invalid mode: {mode} (must be 'label' or 'annotation')")


class ManifestParseError(KubeChecksumError):
    """The input stream is not valid YAML."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(f"failed to parse YAML: {message}")


class ManifestRenderError(KubeChecksumError):
    def __init__(self, message: str):
        super().__init__(f"failed to render YAML: {message}")


class DecodeError(KubeChecksumError):
    """A document does not fit the typed resource it claims to be."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

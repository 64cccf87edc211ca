#!/usr/bin/env python3
"""
KUBECHECKSUM LOADER - Document Parser
-------------------------------------
Splits a raw multi-document manifest stream into ruamel round-trip trees.
Every key order, comment and quoting hint survives the load so that the
exporter can write the documents back byte-for-byte where untouched.
"""

import logging
from typing import Any, List

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubechecksum.core.errors import ManifestParseError

logger = logging.getLogger("kubechecksum.loader")


class KubeLoader:
    """
    The Reader: turns text into an ordered list of document trees.
    Empty documents are dropped; a single syntax error fails the whole stream.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.preserve_quotes = True

    def _clean_artifacts(self, text: str) -> str:
        """Removes a UTF-8 BOM and standardizes line endings."""
        text = text.lstrip('\ufeff')
        return text.replace('\r\n', '\n')

    @staticmethod
    def is_empty(doc: Any) -> bool:
        return doc is None

    def load(self, raw_text: str) -> List[Any]:
        """
        Parses every document in the stream.

        Raises:
            ManifestParseError: on the first YAML error, with its location.
        """
        text = self._clean_artifacts(raw_text)
        documents = []
        dropped = 0

        try:
            # load_all is lazy: errors surface while iterating
            for doc in self.yaml.load_all(text):
                if self.is_empty(doc):
                    dropped += 1
                    continue
                documents.append(doc)
        except YAMLError as e:
            mark = getattr(e, 'problem_mark', None) or getattr(e, 'context_mark', None)
            problem = getattr(e, 'problem', None) or str(e)
            if mark is not None:
                raise ManifestParseError(problem, line=mark.line + 1, column=mark.column + 1) from e
            raise ManifestParseError(problem) from e

        if dropped:
            logger.debug(f"Dropped {dropped} empty document(s)")
        logger.debug(f"Loaded {len(documents)} document(s)")
        return documents

#!/usr/bin/env python3
"""
KUBECHECKSUM EXPORTER - High-Fidelity Round-Trip
------------------------------------------------
Writes the (possibly mutated) document trees back into one stream.
Keys are never reordered: only nodes the injector touched may differ
from the input.
"""

import io
from typing import Any, List

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubechecksum.core.errors import ManifestRenderError


class KubeExporter:
    """
    The Reconstructor: converts round-trip trees back to a YAML string.
    """

    def __init__(self, mapping_indent: int = 2, sequence_indent: int = 4,
                 sequence_offset: int = 2, width: int = 4096):
        self.yaml = YAML(typ='rt')
        self.yaml.preserve_quotes = True
        # Standard K8s: 2 spaces, sequences indented 4 with the dash at offset 2
        self.yaml.indent(mapping=mapping_indent, sequence=sequence_indent, offset=sequence_offset)
        self.yaml.width = width

    def export(self, docs: List[Any]) -> str:
        """
        Renders all documents in order. Documents after the first are
        preceded by a `---` marker.
        """
        if not docs:
            return ""

        stream = io.StringIO()
        try:
            self.yaml.dump_all(docs, stream)
        except YAMLError as e:
            raise ManifestRenderError(str(e)) from e
        return stream.getvalue()

#!/usr/bin/env python3
"""
KUBECHECKSUM ENGINE - The I/O Orchestrator
------------------------------------------
Wraps the InjectionPipeline with whole-stream input and output: read
everything, transform everything, then write everything. Nothing is
written when any earlier step fails.
"""

import os
import sys
import time
import logging
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from kubechecksum.core.models import InjectionMode
from kubechecksum.stream.context import InjectionContext
from kubechecksum.stream.pipeline import InjectionPipeline

logger = logging.getLogger("kubechecksum.engine")


class InjectionEngine:
    """
    Principal orchestrator for one invocation of the injector.
    """

    def __init__(self, mode: InjectionMode = InjectionMode.LABEL,
                 pipeline: Optional[InjectionPipeline] = None):
        self.mode = mode
        self.pipeline = pipeline or InjectionPipeline(mode)

    def read_input(self, path: Optional[str] = None, stream: Optional[TextIO] = None) -> str:
        """
        Reads the full manifest stream from `path`, or from `stream`
        (stdin by default). A leading BOM is tolerated.
        """
        if path:
            source = Path(path)
            logger.debug(f"Reading manifests from {source}")
            return source.read_text(encoding='utf-8-sig')
        stream = stream or sys.stdin
        buffer = getattr(stream, 'buffer', None)
        if buffer is not None:
            return buffer.read().decode('utf-8-sig')
        return stream.read()

    def process(self, raw_text: str) -> InjectionContext:
        started = time.monotonic()
        context = self.pipeline.run(raw_text)
        logger.debug(f"Processed {len(context.documents)} document(s) in {time.monotonic() - started:.3f}s")
        return context

    def write_output(self, content: str, path: Optional[str] = None, stream: Optional[TextIO] = None):
        """Writes to `path` atomically, or to `stream` (stdout by default)."""
        if path:
            self._atomic_write(Path(path), content)
            logger.info(f"Wrote manifests to {path}")
            return
        stream = stream or sys.stdout
        buffer = getattr(stream, 'buffer', None)
        if buffer is not None:
            # Bypass the locale encoding of the text layer
            stream.flush()
            buffer.write(content.encode('utf-8'))
            buffer.flush()
            return
        stream.write(content)
        stream.flush()

    def run(self, input_path: Optional[str] = None, output_path: Optional[str] = None,
            stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> InjectionContext:
        """Full read -> process -> write cycle."""
        raw_text = self.read_input(input_path, stdin)
        context = self.process(raw_text)
        self.write_output(context.output_text, output_path, stdout)
        return context

    def generate_summary(self, context: InjectionContext) -> Dict[str, Any]:
        """Counts for the CLI report."""
        return {
            "documents": len(context.documents),
            "config_maps": len(context.config_map_hashes),
            "secrets": len(context.secret_hashes),
            "deployments": len(context.deployments),
            "mutated": len(context.mutated_deployments),
            "skipped": len(context.skipped),
            "mode": context.mode.value,
        }

    def _atomic_write(self, target_path: Path, content: str):
        parent = target_path.resolve().parent
        if not os.access(parent, os.W_OK):
            raise PermissionError(f"No write access to {parent}")
        temp_file = target_path.with_name(target_path.name + '.kubechecksum.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except OSError:
            if temp_file.exists():
                temp_file.unlink()
            raise

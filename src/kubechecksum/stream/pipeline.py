#!/usr/bin/env python3
"""
KUBECHECKSUM PIPELINE - The Coordinator
---------------------------------------
Runs a manifest stream through parse, classify, decode, hash, inject and
export in a fixed order. The typed resources only drive hashing and
reference discovery; the original trees are what gets written back.
"""

import logging
from typing import Optional, Union

from kubechecksum.core.errors import DecodeError
from kubechecksum.core.models import InjectionMode
from kubechecksum.decoder.decoder import KubeDecoder
from kubechecksum.rules.hasher import build_checksum_table, hash_config_map, hash_secret
from kubechecksum.rules.injector import ChecksumInjector, build_pairs
from kubechecksum.rules.references import referenced_objects
from kubechecksum.stream.context import DeploymentRecord, InjectionContext, SkippedDocument
from kubechecksum.stream.exporter import KubeExporter
from kubechecksum.stream.loader import KubeLoader
from kubechecksum.stream.scanner import (
    KIND_CONFIGMAP,
    KIND_DEPLOYMENT,
    KIND_SECRET,
    KubeScanner,
)

logger = logging.getLogger("kubechecksum.pipeline")


class InjectionPipeline:
    """
    The Orchestrator: one instance can run many streams; each run gets a
    fresh InjectionContext and shares no state with the previous one.
    """

    def __init__(self, mode: InjectionMode = InjectionMode.LABEL,
                 exporter: Optional[KubeExporter] = None):
        self.mode = mode
        self.loader = KubeLoader()
        self.scanner = KubeScanner()
        self.decoder = KubeDecoder()
        self.injector = ChecksumInjector()
        self.exporter = exporter or KubeExporter()

    def run(self, input_text: str) -> InjectionContext:
        """
        Transforms the stream. Raises ManifestParseError or
        ManifestRenderError; per-document decode problems are logged and
        the document is passed through.
        """
        context = InjectionContext(raw_text=input_text, mode=self.mode)

        # --- PHASE 1: PARSE ---
        context.documents = self.loader.load(input_text)

        # --- PHASE 2: CLASSIFY & DECODE ---
        config_maps = []
        secrets = []
        for index, doc in enumerate(context.documents):
            kind, name = self.scanner.get_identity(doc)
            context.kinds.append(kind)
            if not self.scanner.is_routed(kind):
                continue

            try:
                if kind == KIND_CONFIGMAP:
                    config_maps.append(self.decoder.decode_config_map(doc))
                elif kind == KIND_SECRET:
                    secrets.append(self.decoder.decode_secret(doc))
                elif kind == KIND_DEPLOYMENT:
                    context.deployments.append(DeploymentRecord(
                        index=index,
                        name=name,
                        document=doc,
                        resource=self.decoder.decode_deployment(doc),
                    ))
            except DecodeError as e:
                logger.warning(f"Passing through {kind} '{name or '<unnamed>'}' (document {index + 1}): {e}")
                context.skipped.append(SkippedDocument(index=index, kind=kind, name=name, reason=str(e)))

        # --- PHASE 3: CHECKSUM TABLES ---
        context.config_map_hashes = build_checksum_table(config_maps, hash_config_map)
        context.secret_hashes = build_checksum_table(secrets, hash_secret)

        # --- PHASE 4: REFERENCES & INJECTION ---
        for record in context.deployments:
            record.references = referenced_objects(record.resource)
            record.pairs = build_pairs(record.references, context.config_map_hashes, context.secret_hashes)
            if not record.pairs:
                logger.info(f"Deployment '{record.name}' references no known ConfigMap or Secret")
                continue
            record.mutated = self.injector.inject(record.document, record.pairs, self.mode)
            if record.mutated:
                logger.info(f"Deployment '{record.name}': set {len(record.pairs)} checksum {self.mode.value}(s)")

        # --- PHASE 5: EXPORT ---
        context.output_text = self.exporter.export(context.documents)
        return context


def inject_checksums(input_text: str, mode: Union[InjectionMode, str] = InjectionMode.LABEL) -> str:
    """
    Returns `input_text` with checksum markers added to every Deployment
    that references a ConfigMap or Secret present in the same stream.
    """
    if not isinstance(mode, InjectionMode):
        mode = InjectionMode.parse(mode)
    return InjectionPipeline(mode).run(input_text).output_text

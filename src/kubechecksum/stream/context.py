#!/usr/bin/env python3
"""
KUBECHECKSUM INJECTION CONTEXT
------------------------------
The per-run record of a manifest stream going through the pipeline.
It carries the document trees, the checksum tables and what happened to
each Deployment. Nothing here outlives a single run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kubechecksum.core.models import ChecksumPair, Deployment, InjectionMode, ReferenceSet


@dataclass
class DeploymentRecord:
    """A Deployment's original tree paired with its typed projection."""
    index: int                             # Position in the document stream
    name: str
    document: Any                          # The round-trip tree that gets re-emitted
    resource: Deployment
    references: ReferenceSet = field(default_factory=ReferenceSet)
    pairs: List[ChecksumPair] = field(default_factory=list)
    mutated: bool = False


@dataclass
class SkippedDocument:
    index: int
    kind: str
    name: str
    reason: str


@dataclass
class InjectionContext:
    """
    Initialized by the InjectionPipeline and filled phase by phase.
    """
    raw_text: str
    mode: InjectionMode
    documents: List[Any] = field(default_factory=list)        # Trees in stream order
    kinds: List[str] = field(default_factory=list)            # Parallel to documents
    config_map_hashes: Dict[str, str] = field(default_factory=dict)
    secret_hashes: Dict[str, str] = field(default_factory=dict)
    deployments: List[DeploymentRecord] = field(default_factory=list)
    skipped: List[SkippedDocument] = field(default_factory=list)
    output_text: Optional[str] = None

    @property
    def mutated_deployments(self) -> List[DeploymentRecord]:
        return [record for record in self.deployments if record.mutated]

    @property
    def is_modified(self) -> bool:
        return bool(self.mutated_deployments)

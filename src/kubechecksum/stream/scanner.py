#!/usr/bin/env python3
"""
KUBECHECKSUM SCANNER - Kind Classifier
--------------------------------------
Reads the identity of a document tree (kind, name) without decoding it,
so that malformed documents can still be routed or passed through.
"""

from typing import Any, Tuple

KIND_CONFIGMAP = "ConfigMap"
KIND_SECRET = "Secret"
KIND_DEPLOYMENT = "Deployment"


class KubeScanner:
    """
    Identifies Kubernetes resources by their top-level `kind`.
    Only the kinds in ROUTED_KINDS are handed to the decoder.
    """

    ROUTED_KINDS = (KIND_CONFIGMAP, KIND_SECRET, KIND_DEPLOYMENT)

    def get_kind(self, doc: Any) -> str:
        """Returns the `kind` string, or "" for empty/non-mapping roots."""
        if not isinstance(doc, dict):
            return ""
        kind = doc.get("kind")
        return str(kind) if isinstance(kind, str) else ""

    def get_name(self, doc: Any) -> str:
        if not isinstance(doc, dict):
            return ""
        metadata = doc.get("metadata")
        if not isinstance(metadata, dict):
            return ""
        name = metadata.get("name")
        return str(name) if isinstance(name, str) else ""

    def get_identity(self, doc: Any) -> Tuple[str, str]:
        """Provides (kind, name) for logging and reports."""
        return self.get_kind(doc), self.get_name(doc)

    def is_routed(self, kind: str) -> bool:
        return kind in self.ROUTED_KINDS

#!/usr/bin/env python3
"""
KUBECHECKSUM HASHER - Content Fingerprints
------------------------------------------
Stable short hashes over ConfigMap/Secret payloads, and the per-run
name -> hash tables built from them.
"""

import hashlib
import logging
from typing import Callable, Dict, Iterable, Mapping, TypeVar, Union

from kubechecksum.core.models import CHECKSUM_LENGTH, ConfigMap, Secret

logger = logging.getLogger("kubechecksum.hasher")

Resource = TypeVar("Resource", ConfigMap, Secret)


def hash_payload(payload: Mapping[str, bytes]) -> str:
    """
    SHA-256 over key bytes immediately followed by value bytes, in sorted
    key order with no separators. Returns the first 12 hex characters.
    """
    digest = hashlib.sha256()
    for key in sorted(payload):
        digest.update(key.encode('utf-8'))
        digest.update(payload[key])
    return digest.hexdigest()[:CHECKSUM_LENGTH]


def config_map_payload(config_map: ConfigMap) -> Dict[str, bytes]:
    """`binaryData` and `data` share one key space; `data` wins on a clash."""
    payload: Dict[str, bytes] = dict(config_map.binary_data)
    for key, value in config_map.data.items():
        payload[key] = value.encode('utf-8')
    return payload


def hash_config_map(config_map: ConfigMap) -> str:
    return hash_payload(config_map_payload(config_map))


def hash_secret(secret: Secret) -> str:
    return hash_payload(secret.data)


def hash_resource(resource: Union[ConfigMap, Secret]) -> str:
    if isinstance(resource, Secret):
        return hash_secret(resource)
    return hash_config_map(resource)


def build_checksum_table(resources: Iterable[Resource],
                         hash_fn: Callable[[Resource], str] = hash_resource) -> Dict[str, str]:
    """
    Maps resource name -> hash. Unnamed resources are skipped; when a name
    repeats, the last resource in stream order wins.
    """
    table: Dict[str, str] = {}
    for resource in resources:
        name = resource.metadata.name
        kind = type(resource).__name__
        if not name:
            logger.debug(f"Skipping {kind} without metadata.name")
            continue
        if name in table:
            logger.info(f"{kind} '{name}' appears more than once; using the last one")
        table[name] = hash_fn(resource)
    return table

#!/usr/bin/env python3
"""
KUBECHECKSUM REFERENCES - Dependency Discovery
----------------------------------------------
Enumerates every ConfigMap and Secret a Deployment's pod template pulls
in: mounted volumes (plain and projected), `envFrom` and
`env[].valueFrom` on both regular and init containers.
"""

from typing import Iterable, Optional, Set

from kubechecksum.core.models import Deployment, LocalObjectReference, ReferenceSet


def _add(names: Set[str], ref: Optional[LocalObjectReference]):
    if ref is not None:
        names.add(ref.name)


def _sorted_names(names: Iterable[str]):
    return sorted(name for name in names if name)


def referenced_objects(deployment: Deployment) -> ReferenceSet:
    """
    Returns the ConfigMap and Secret names the Deployment depends on.
    Both lists are deduplicated, free of empty names and sorted so that
    the injected keys come out in the same order on every run.
    """
    config_maps: Set[str] = set()
    secrets: Set[str] = set()
    pod_spec = deployment.template.spec

    for volume in pod_spec.volumes:
        _add(config_maps, volume.config_map)
        _add(secrets, volume.secret)
        for projection in volume.projected:
            _add(config_maps, projection.config_map)
            _add(secrets, projection.secret)

    for container in pod_spec.init_containers + pod_spec.containers:
        for source in container.env_from:
            _add(config_maps, source.config_map_ref)
            _add(secrets, source.secret_ref)
        for var in container.env:
            # Literal values carry no reference
            _add(config_maps, var.config_map_key_ref)
            _add(secrets, var.secret_key_ref)

    return ReferenceSet(config_maps=_sorted_names(config_maps), secrets=_sorted_names(secrets))

#!/usr/bin/env python3
"""
KUBECHECKSUM CORE MODELS
------------------------
Typed, read-only projections of the Kubernetes resources the injector
reasons about. These are decoded from the round-trip document trees and
discarded after each run; they are never written back into a tree.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from kubechecksum.core.errors import InvalidModeError

CHECKSUM_LENGTH = 12
CONFIGMAP_KEY_PREFIX = "checksum/configmap-"
SECRET_KEY_PREFIX = "checksum/secret-"


class InjectionMode(enum.Enum):
    """Where checksum markers are written on the pod template."""
    LABEL = "label"
    ANNOTATION = "annotation"

    @classmethod
    def parse(cls, value: str) -> "InjectionMode":
        try:
            return cls(value)
        except ValueError:
            raise InvalidModeError(value) from None

    @property
    def target_field(self) -> str:
        return "labels" if self is InjectionMode.LABEL else "annotations"


@dataclass
class ObjectMeta:
    name: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)


@dataclass
class ConfigMap:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    data: Dict[str, str] = field(default_factory=dict)
    binary_data: Dict[str, bytes] = field(default_factory=dict)


@dataclass
class Secret:
    """
    A Secret with `data` and `stringData` already merged into one byte map.
    """
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    data: Dict[str, bytes] = field(default_factory=dict)


@dataclass
class LocalObjectReference:
    """A by-name pointer to a ConfigMap or Secret in the same namespace."""
    name: str = ""


@dataclass
class VolumeProjection:
    config_map: Optional[LocalObjectReference] = None
    secret: Optional[LocalObjectReference] = None


@dataclass
class Volume:
    name: str = ""
    config_map: Optional[LocalObjectReference] = None
    secret: Optional[LocalObjectReference] = None  # Carries `secretName`
    projected: List[VolumeProjection] = field(default_factory=list)


@dataclass
class EnvFromSource:
    config_map_ref: Optional[LocalObjectReference] = None
    secret_ref: Optional[LocalObjectReference] = None


@dataclass
class EnvVar:
    name: str = ""
    value: Optional[str] = None
    config_map_key_ref: Optional[LocalObjectReference] = None
    secret_key_ref: Optional[LocalObjectReference] = None


@dataclass
class Container:
    name: str = ""
    env_from: List[EnvFromSource] = field(default_factory=list)
    env: List[EnvVar] = field(default_factory=list)


@dataclass
class PodSpec:
    volumes: List[Volume] = field(default_factory=list)
    init_containers: List[Container] = field(default_factory=list)
    containers: List[Container] = field(default_factory=list)


@dataclass
class PodTemplate:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: PodSpec = field(default_factory=PodSpec)


@dataclass
class Deployment:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    template: PodTemplate = field(default_factory=PodTemplate)


@dataclass
class ReferenceSet:
    """ConfigMap and Secret names a Deployment depends on, sorted and unique."""
    config_maps: List[str] = field(default_factory=list)
    secrets: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.config_maps or self.secrets)


@dataclass(frozen=True)
class ChecksumPair:
    key: str
    value: str

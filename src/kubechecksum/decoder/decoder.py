#!/usr/bin/env python3
"""
KUBECHECKSUM DECODER - Typed Projection
---------------------------------------
Converts a round-trip document tree into the read-only dataclasses of
core.models. Unknown fields are ignored and missing/null fields decode
to their empty value. Scalars in string fields are read as their YAML
text (`8080` -> "8080", `2020-01-01` -> "2020-01-01"), but a mapping or
sequence where a string belongs raises DecodeError so the caller can
exclude the document and pass it through untouched.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean

from kubechecksum.core.errors import DecodeError
from kubechecksum.core.models import (
    ConfigMap,
    Container,
    Deployment,
    EnvFromSource,
    EnvVar,
    LocalObjectReference,
    ObjectMeta,
    PodSpec,
    PodTemplate,
    Secret,
    Volume,
    VolumeProjection,
)

logger = logging.getLogger("kubechecksum.decoder")


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


class KubeDecoder:
    """
    Reads only the fields needed for hashing and reference discovery.
    """

    def __init__(self):
        # Renders floats and timestamps back to their source text
        self._representer = YAML(typ='rt').representer

    # --- Scalar & container helpers ---

    def _mapping(self, value: Any, path: str) -> Dict[Any, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise DecodeError(path, "expected a mapping")
        return value

    def _sequence(self, value: Any, path: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise DecodeError(path, "expected a sequence")
        return value

    def _string(self, value: Any, path: str) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return str(value)
        if isinstance(value, (dict, list)):
            raise DecodeError(path, f"expected a string, got {type(value).__name__}")
        if isinstance(value, (bool, ScalarBoolean)):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(int(value))
        try:
            return str(self._representer.represent_data(value).value)
        except YAMLError as e:
            raise DecodeError(path, f"unsupported scalar: {e}") from e

    def _key(self, key: Any, path: str) -> str:
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise DecodeError(path, f"unsupported key {key!r}")
        return str(key)

    def _string_map(self, value: Any, path: str) -> Dict[str, str]:
        result = {}
        for key, item in self._mapping(value, path).items():
            name = self._key(key, path)
            result[name] = self._string(item, _join(path, name))
        return result

    def _bytes(self, value: Any, path: str) -> bytes:
        """Base64 with strict padding; line breaks inside the value are ignored."""
        encoded = self._string(value, path).replace('\r', '').replace('\n', '')
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(path, f"illegal base64 data: {e}") from e

    def _bytes_map(self, value: Any, path: str) -> Dict[str, bytes]:
        result = {}
        for key, item in self._mapping(value, path).items():
            name = self._key(key, path)
            result[name] = self._bytes(item, _join(path, name))
        return result

    # --- Shared structures ---

    def _metadata(self, value: Any, path: str) -> ObjectMeta:
        meta = self._mapping(value, path)
        return ObjectMeta(
            name=self._string(meta.get("name"), _join(path, "name")),
            labels=self._string_map(meta.get("labels"), _join(path, "labels")),
            annotations=self._string_map(meta.get("annotations"), _join(path, "annotations")),
        )

    def _reference(self, value: Any, path: str, name_field: str = "name") -> Optional[LocalObjectReference]:
        if value is None:
            return None
        ref = self._mapping(value, path)
        return LocalObjectReference(
            name=self._string(ref.get(name_field), _join(path, name_field)),
        )

    # --- Pod template ---

    def _volume(self, value: Any, path: str) -> Volume:
        volume = self._mapping(value, path)
        projected = self._mapping(volume.get("projected"), _join(path, "projected"))
        sources_path = _join(path, "projected.sources")
        projections = []
        for i, item in enumerate(self._sequence(projected.get("sources"), sources_path)):
            item_path = f"{sources_path}[{i}]"
            source = self._mapping(item, item_path)
            projections.append(VolumeProjection(
                config_map=self._reference(source.get("configMap"), _join(item_path, "configMap")),
                secret=self._reference(source.get("secret"), _join(item_path, "secret")),
            ))

        return Volume(
            name=self._string(volume.get("name"), _join(path, "name")),
            config_map=self._reference(volume.get("configMap"), _join(path, "configMap")),
            secret=self._reference(volume.get("secret"), _join(path, "secret"), name_field="secretName"),
            projected=projections,
        )

    def _env_from(self, value: Any, path: str) -> EnvFromSource:
        source = self._mapping(value, path)
        return EnvFromSource(
            config_map_ref=self._reference(source.get("configMapRef"), _join(path, "configMapRef")),
            secret_ref=self._reference(source.get("secretRef"), _join(path, "secretRef")),
        )

    def _env_var(self, value: Any, path: str) -> EnvVar:
        var = self._mapping(value, path)
        value_from = self._mapping(var.get("valueFrom"), _join(path, "valueFrom"))
        from_path = _join(path, "valueFrom")
        literal = var.get("value")
        return EnvVar(
            name=self._string(var.get("name"), _join(path, "name")),
            value=None if literal is None else self._string(literal, _join(path, "value")),
            config_map_key_ref=self._reference(value_from.get("configMapKeyRef"), _join(from_path, "configMapKeyRef")),
            secret_key_ref=self._reference(value_from.get("secretKeyRef"), _join(from_path, "secretKeyRef")),
        )

    def _container(self, value: Any, path: str) -> Container:
        container = self._mapping(value, path)
        env_from_path = _join(path, "envFrom")
        env_path = _join(path, "env")
        return Container(
            name=self._string(container.get("name"), _join(path, "name")),
            env_from=[
                self._env_from(item, f"{env_from_path}[{i}]")
                for i, item in enumerate(self._sequence(container.get("envFrom"), env_from_path))
            ],
            env=[
                self._env_var(item, f"{env_path}[{i}]")
                for i, item in enumerate(self._sequence(container.get("env"), env_path))
            ],
        )

    def _containers(self, value: Any, path: str) -> List[Container]:
        return [self._container(item, f"{path}[{i}]") for i, item in enumerate(self._sequence(value, path))]

    def _pod_spec(self, value: Any, path: str) -> PodSpec:
        spec = self._mapping(value, path)
        volumes_path = _join(path, "volumes")
        return PodSpec(
            volumes=[
                self._volume(item, f"{volumes_path}[{i}]")
                for i, item in enumerate(self._sequence(spec.get("volumes"), volumes_path))
            ],
            init_containers=self._containers(spec.get("initContainers"), _join(path, "initContainers")),
            containers=self._containers(spec.get("containers"), _join(path, "containers")),
        )

    # --- Public API ---

    def decode_config_map(self, doc: Any) -> ConfigMap:
        root = self._mapping(doc, "")
        return ConfigMap(
            metadata=self._metadata(root.get("metadata"), "metadata"),
            data=self._string_map(root.get("data"), "data"),
            binary_data=self._bytes_map(root.get("binaryData"), "binaryData"),
        )

    def decode_secret(self, doc: Any) -> Secret:
        """
        Decodes a Secret, folding `stringData` into the byte-valued `data`
        map. On a key present in both, `stringData` wins.
        """
        root = self._mapping(doc, "")
        data = self._bytes_map(root.get("data"), "data")
        string_data = self._string_map(root.get("stringData"), "stringData")

        for key, value in string_data.items():
            if key in data:
                logger.debug(f"Secret key '{key}' set in both data and stringData; stringData wins")
            data[key] = value.encode('utf-8')

        return Secret(
            metadata=self._metadata(root.get("metadata"), "metadata"),
            data=data,
        )

    def decode_deployment(self, doc: Any) -> Deployment:
        root = self._mapping(doc, "")
        spec = self._mapping(root.get("spec"), "spec")
        template = self._mapping(spec.get("template"), "spec.template")
        return Deployment(
            metadata=self._metadata(root.get("metadata"), "metadata"),
            template=PodTemplate(
                metadata=self._metadata(template.get("metadata"), "spec.template.metadata"),
                spec=self._pod_spec(template.get("spec"), "spec.template.spec"),
            ),
        )

#!/usr/bin/env python3
"""
KUBECHECKSUM INJECTOR - Tree Mutation
-------------------------------------
Writes checksum markers into a Deployment's original round-trip tree.
All changes go through CommentedMap operations so that every node not
on the target path keeps its position, style and comments.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.tokens import CommentToken

from kubechecksum.core.models import (
    CONFIGMAP_KEY_PREFIX,
    SECRET_KEY_PREFIX,
    ChecksumPair,
    InjectionMode,
    ReferenceSet,
)

logger = logging.getLogger("kubechecksum.injector")

TEMPLATE_METADATA_PATH = ("spec", "template", "metadata")


def sanitize_name(name: str) -> str:
    """Label keys cannot carry periods in the name segment."""
    return name.replace('.', '-')


def checksum_key(prefix: str, name: str) -> str:
    return prefix + sanitize_name(name)


def build_pairs(refs: ReferenceSet, config_map_hashes: Dict[str, str],
                secret_hashes: Dict[str, str]) -> List[ChecksumPair]:
    """
    One pair per referenced resource that exists in the tables.
    ConfigMaps come first, then Secrets, each in the order of `refs`.
    """
    pairs = []
    for name in refs.config_maps:
        if name in config_map_hashes:
            pairs.append(ChecksumPair(checksum_key(CONFIGMAP_KEY_PREFIX, name), config_map_hashes[name]))
    for name in refs.secrets:
        if name in secret_hashes:
            pairs.append(ChecksumPair(checksum_key(SECRET_KEY_PREFIX, name), secret_hashes[name]))
    return pairs


class ChecksumInjector:
    """
    The Surgeon: edits only `spec.template.metadata.labels` or
    `spec.template.metadata.annotations`, creating the path if needed.
    """

    def __init__(self):
        self._carried_comment: Optional[CommentToken] = None

    def inject(self, doc: Any, pairs: Sequence[ChecksumPair], mode: InjectionMode) -> bool:
        """
        Sets every pair on the target map of `doc`, in place.
        Returns True if the tree was touched.
        """
        if not pairs:
            return False
        if not isinstance(doc, dict):
            logger.warning("Skipping injection into a document whose root is not a mapping")
            return False

        self._carried_comment = None
        target = self._ensure_map(doc, TEMPLATE_METADATA_PATH + (mode.target_field,))
        for pair in pairs:
            self._set_value(target, pair.key, pair.value)
        return True

    def _ensure_map(self, root: Any, path: Sequence[str]) -> Any:
        """
        Walks `path`, creating missing maps at the end of their parent and
        replacing null/scalar values with an empty map in place.
        """
        current = root
        for key in path:
            child = current.get(key)
            if not isinstance(child, dict):
                replacement = CommentedMap()
                if key in current:
                    logger.debug(f"Replacing non-mapping value at '{key}' with an empty map")
                    current[key] = replacement
                else:
                    self._append(current, key, replacement)
                child = replacement
            current = child
        return current

    def _set_value(self, mapping: Any, key: str, value: str):
        if key in mapping:
            # Assignment keeps the key's position and attached comments
            if mapping[key] != value:
                logger.debug(f"Updating '{key}': {mapping[key]} -> {value}")
            mapping[key] = value
        else:
            self._append(mapping, key, value)

    def _append(self, mapping: Any, key: str, value: Any):
        """
        Adds a new key at the end. An empty `{}` becomes a block map.

        Comment lines between this map and the next, less-indented key are
        stored on the map's last item; they are carried down to the new
        last item so they stay in front of that next key.
        """
        if not mapping and isinstance(mapping, CommentedMap) and mapping.fa.flow_style():
            mapping.fa.set_block_style()

        token = self._detach_trailing_comment(mapping)
        if token is not None:
            self._carried_comment = token

        mapping[key] = value
        if self._carried_comment is not None and not isinstance(value, dict) and isinstance(mapping, CommentedMap):
            mapping.ca.items[key] = [None, None, self._carried_comment, None]
            self._carried_comment = None

    def _detach_trailing_comment(self, node: Any) -> Optional[CommentToken]:
        """
        Splits the comment lines that follow the last entry of `node` (at
        any depth) off that entry. An end-of-line comment stays in place.
        """
        if isinstance(node, CommentedMap) and node and not node.fa.flow_style():
            last, slot = list(node)[-1], 2
        elif isinstance(node, CommentedSeq) and node and not node.fa.flow_style():
            last, slot = len(node) - 1, 0
        else:
            return None

        nested = self._detach_trailing_comment(node[last])
        if nested is not None:
            return nested

        entry = node.ca.items.get(last)
        if not entry or len(entry) <= slot or entry[slot] is None:
            return None
        token = entry[slot]
        eol, _, following = token.value.partition('\n')
        if not following:
            return None

        entry[slot] = CommentToken(eol + '\n', token.start_mark, None) if eol else None
        return CommentToken('\n' + following, token.start_mark, None)

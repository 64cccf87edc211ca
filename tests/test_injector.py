#!/usr/bin/env python3
"""
KUBECHECKSUM INJECTOR SUITE
---------------------------
Surgical tree mutation: target creation, overwrite-in-place, mode
isolation and key sanitization.
"""

import pytest
from ruamel.yaml import YAML

from kubechecksum.core.models import ChecksumPair, InjectionMode, ReferenceSet
from kubechecksum.rules.injector import ChecksumInjector, build_pairs, checksum_key, sanitize_name
from kubechecksum.stream.exporter import KubeExporter

MANIFEST = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: demo
spec:
  template:
    metadata:
      labels:
        app: demo  # keep me
    spec:
      containers:
        - name: app
          image: demo:latest
"""

PAIRS = [
    ChecksumPair("checksum/configmap-app-config", "111111111111"),
    ChecksumPair("checksum/secret-top-secret", "333333333333"),
]


def _load(text):
    return YAML(typ='rt').load(text)


def _render(doc):
    return KubeExporter().export([doc])


@pytest.mark.parametrize("name, expected", [
    ("a.b.c", "a-b-c"),
    ("no-dots", "no-dots"),
    ("app.config-v2", "app-config-v2"),
    ("plain", "plain"),
])
def test_sanitize_name(name, expected):
    assert sanitize_name(name) == expected


def test_checksum_key_format():
    assert checksum_key("checksum/configmap-", "app.config") == "checksum/configmap-app-config"
    assert checksum_key("checksum/secret-", "top.secret") == "checksum/secret-top-secret"


def test_build_pairs_only_for_known_resources():
    refs = ReferenceSet(config_maps=["app.config", "missing"], secrets=["top.secret"])
    pairs = build_pairs(refs, {"app.config": "111111111111", "unused": "999999999999"},
                        {"top.secret": "333333333333"})
    assert pairs == PAIRS


def test_label_mode_keeps_existing_labels():
    doc = _load(MANIFEST)
    assert ChecksumInjector().inject(doc, PAIRS, InjectionMode.LABEL) is True

    metadata = doc["spec"]["template"]["metadata"]
    assert list(metadata["labels"].items()) == [
        ("app", "demo"),
        ("checksum/configmap-app-config", "111111111111"),
        ("checksum/secret-top-secret", "333333333333"),
    ]
    assert "annotations" not in metadata
    assert "# keep me" in _render(doc)


def test_annotation_mode_creates_map_without_touching_labels():
    doc = _load(MANIFEST)
    ChecksumInjector().inject(doc, PAIRS, InjectionMode.ANNOTATION)

    metadata = doc["spec"]["template"]["metadata"]
    assert dict(metadata["labels"]) == {"app": "demo"}
    assert dict(metadata["annotations"]) == {
        "checksum/configmap-app-config": "111111111111",
        "checksum/secret-top-secret": "333333333333",
    }
    assert list(metadata) == ["labels", "annotations"]


def test_existing_key_is_overwritten_in_place():
    doc = _load(MANIFEST.replace(
        "        app: demo  # keep me\n",
        "        checksum/configmap-app-config: \"000000000000\"\n        app: demo  # keep me\n",
    ))
    ChecksumInjector().inject(doc, PAIRS[:1], InjectionMode.LABEL)

    labels = doc["spec"]["template"]["metadata"]["labels"]
    assert list(labels.items()) == [("checksum/configmap-app-config", "111111111111"), ("app", "demo")]


def test_missing_intermediate_maps_are_created():
    doc = _load("apiVersion: apps/v1\nkind: Deployment\nmetadata:\n  name: bare\n")
    ChecksumInjector().inject(doc, PAIRS[:1], InjectionMode.ANNOTATION)

    assert doc["spec"]["template"]["metadata"]["annotations"] == {
        "checksum/configmap-app-config": "111111111111",
    }
    assert list(doc) == ["apiVersion", "kind", "metadata", "spec"]


def test_null_and_empty_flow_maps_become_block_maps():
    doc = _load(
        "kind: Deployment\n"
        "spec:\n"
        "  template:\n"
        "    metadata: {}\n"
        "    spec:\n"
        "      containers: []\n"
    )
    ChecksumInjector().inject(doc, PAIRS[:1], InjectionMode.LABEL)

    rendered = _render(doc)
    assert "    metadata:\n      labels:\n        checksum/configmap-app-config: '111111111111'\n" in rendered
    assert YAML(typ='safe').load(rendered)["spec"]["template"]["spec"] == {"containers": []}

    doc = _load("kind: Deployment\nspec:\n  template:\n    metadata:\n")
    ChecksumInjector().inject(doc, PAIRS[:1], InjectionMode.LABEL)
    assert YAML(typ='safe').load(_render(doc))["spec"]["template"]["metadata"] == {
        "labels": {"checksum/configmap-app-config": "111111111111"},
    }


@pytest.mark.parametrize("mode, target", [
    (InjectionMode.LABEL, "labels"),
    (InjectionMode.ANNOTATION, "annotations"),
])
def test_comment_before_next_key_stays_in_front_of_it(mode, target):
    doc = _load(MANIFEST.replace("    spec:\n", "    # pod spec follows\n    spec:\n"))
    ChecksumInjector().inject(doc, PAIRS, mode)

    rendered = _render(doc)
    assert "        app: demo  # keep me\n" in rendered
    assert (
        "        checksum/secret-top-secret: '333333333333'\n"
        "    # pod spec follows\n"
        "    spec:\n"
    ) in rendered
    assert rendered.count("# pod spec follows") == 1
    assert YAML(typ='safe').load(rendered)["spec"]["template"]["metadata"][target] == {
        **({"app": "demo"} if target == "labels" else {}),
        "checksum/configmap-app-config": "111111111111",
        "checksum/secret-top-secret": "333333333333",
    }


def test_blank_line_before_next_key_is_kept():
    doc = _load(MANIFEST.replace("        app: demo  # keep me\n", "        app: demo\n\n"))
    ChecksumInjector().inject(doc, PAIRS[:1], InjectionMode.LABEL)

    assert "        checksum/configmap-app-config: '111111111111'\n\n    spec:\n" in _render(doc)


def test_no_pairs_is_a_noop():
    doc = _load(MANIFEST)
    assert ChecksumInjector().inject(doc, [], InjectionMode.LABEL) is False
    assert _render(doc) == MANIFEST


def test_non_mapping_root_is_left_alone():
    doc = _load("- just\n- a list\n")
    assert ChecksumInjector().inject(doc, PAIRS, InjectionMode.LABEL) is False
    assert list(doc) == ["just", "a list"]

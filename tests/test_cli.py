#!/usr/bin/env python3
"""
KUBECHECKSUM CLI SUITE
----------------------
Flag handling, stdin/stdout plumbing, file output and exit codes.
"""

import io
import sys

import pytest
from ruamel.yaml import YAML

from kubechecksum.cli.main import KubeChecksumCLI, main
from kubechecksum.core.engine import InjectionEngine
from kubechecksum.core.models import InjectionMode

STREAM = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: app.config
data:
  a: one
  b: two
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: demo
spec:
  template:
    spec:
      volumes:
        - name: cfg
          configMap:
            name: app.config
      containers:
        - name: app
          image: demo:latest
"""


@pytest.fixture
def stdin(monkeypatch):
    def _feed(text):
        monkeypatch.setattr(sys, "stdin", io.StringIO(text))
    return _feed


def _labels(text):
    docs = list(YAML(typ='safe').load_all(text))
    return docs[1]["spec"]["template"]["metadata"]["labels"]


def test_stdin_to_stdout_default_label_mode(stdin, capsys):
    stdin(STREAM)
    assert KubeChecksumCLI().run([]) == 0

    out = capsys.readouterr().out
    assert _labels(out) == {"checksum/configmap-app-config": "2411a89159e8"}


def test_invalid_mode_exits_before_reading(monkeypatch, capsys):
    class Untouchable(io.StringIO):
        def read(self, *args):
            raise AssertionError("stdin must not be read")

    monkeypatch.setattr(sys, "stdin", Untouchable())
    assert KubeChecksumCLI().run(["--mode", "sidecar"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "invalid mode: sidecar" in captured.err


def test_parse_error_writes_nothing(stdin, capsys):
    stdin(STREAM + "---\nkind: [unclosed\n")
    assert KubeChecksumCLI().run(["--mode", "annotation"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "failed to parse YAML" in captured.err


def test_file_in_file_out(tmp_path, capsys):
    source = tmp_path / "in.yaml"
    target = tmp_path / "out.yaml"
    source.write_text(STREAM, encoding='utf-8')

    assert KubeChecksumCLI().run([str(source), "-o", str(target), "--mode", "label"]) == 0

    assert capsys.readouterr().out == ""
    assert _labels(target.read_text(encoding='utf-8')) == {"checksum/configmap-app-config": "2411a89159e8"}
    assert list(tmp_path.glob("*.tmp")) == []


def test_missing_input_file(tmp_path, capsys):
    assert KubeChecksumCLI().run([str(tmp_path / "nope.yaml")]) == 1
    assert "I/O failure" in capsys.readouterr().err


def test_summary_and_diff_go_to_stderr(stdin, capsys):
    stdin(STREAM)
    assert KubeChecksumCLI().run(["--summary", "--diff"]) == 0

    captured = capsys.readouterr()
    assert "checksum/configmap-app-config" in captured.err
    assert "Checksum Injection Report" in captured.err
    assert "Report" not in captured.out


def test_main_exit_code(stdin):
    stdin(STREAM)
    with pytest.raises(SystemExit) as excinfo:
        main(["--mode", "annotation"])
    assert excinfo.value.code == 0


def test_stdout_is_utf8_regardless_of_locale():
    raw = io.BytesIO()
    stdout = io.TextIOWrapper(raw, encoding='ascii')
    text = STREAM.replace("  b: two\n", "  b: grüße\n")

    context = InjectionEngine(InjectionMode.LABEL).run(stdin=io.StringIO(text), stdout=stdout)

    assert raw.getvalue().decode('utf-8') == context.output_text
    assert "grüße" in context.output_text

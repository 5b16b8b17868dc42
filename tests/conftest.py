from __future__ import annotations

from pathlib import Path

import pytest

from qodo_bridge.config import PluginSettings

FAKE_QODO = """#!/bin/sh
if [ "$1" = "--version" ]; then
  if [ -n "$FAKE_QODO_BROKEN" ]; then
    echo "broken install" >&2
    exit 1
  fi
  echo "qodo 1.2.3"
  exit 0
fi
if [ "$1" = "models" ]; then
  printf '# available models\\n\\nmodel-a\\n  model-b  \\n\\n'
  exit 0
fi
if [ "$1" = "key" ] && [ "$2" = "list" ]; then
  if [ -n "$FAKE_QODO_UNAUTHENTICATED" ]; then
    echo "not logged in" >&2
    exit 1
  fi
  printf 'Keys:\\nName: laptop\\nCreated: 2025-01-01\\nName: ci\\nCreated: 2025-02-02\\n'
  exit 0
fi
if [ "$1" = "key" ]; then
  exit 0
fi
if [ -n "$FAKE_QODO_FAIL" ]; then
  echo "partial output"
  echo "boom" >&2
  exit 3
fi
for arg in "$@"; do
  printf '%s\\n' "$arg"
done
printf '\\n'
"""


@pytest.fixture
def fake_qodo(tmp_path: Path) -> Path:
    """An executable stand-in for qodo that echoes one argument per line."""

    script = tmp_path / "bin" / "qodo"
    script.parent.mkdir()
    script.write_text(FAKE_QODO, encoding="utf-8")
    script.chmod(0o755)
    return script


@pytest.fixture
def missing_qodo(tmp_path: Path) -> Path:
    return tmp_path / "bin" / "does-not-exist"


@pytest.fixture
def settings(tmp_path: Path, fake_qodo: Path) -> PluginSettings:
    return PluginSettings(executable=str(fake_qodo), config_path=tmp_path / "config" / "qodo.json")

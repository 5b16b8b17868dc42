from __future__ import annotations

import json
from pathlib import Path

import pytest

from qodo_bridge.cli_runner import QodoCli
from qodo_bridge.config import ConfigStore, QodoConfig, coerce_value
from qodo_bridge.errors import UnknownConfigKeyError


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "nope" / "qodo.json")

    assert store.load() == QodoConfig()


def test_empty_object_loads_defaults(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text("{}", encoding="utf-8")

    assert ConfigStore(path).load() == QodoConfig()


def test_partial_file_overrides_only_present_fields(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text('{"debug": true}', encoding="utf-8")

    config = ConfigStore(path).load()

    assert config.debug is True
    assert config == QodoConfig().model_copy(update={"debug": True})


def test_camel_case_keys_are_read(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text('{"defaultModel": "grok-4", "noBuiltin": true, "tools": ["git"]}', encoding="utf-8")

    config = ConfigStore(path).load()

    assert config.default_model == "grok-4"
    assert config.no_builtin is True
    assert config.tools == ["git"]


def test_present_list_replaces_default_wholesale(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text('{"tools": []}', encoding="utf-8")

    assert ConfigStore(path).load().tools == []


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text("{not json", encoding="utf-8")

    assert ConfigStore(path).load() == QodoConfig()


def test_mistyped_field_keeps_the_other_fields(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text('{"defaultModel": "gpt-5.2", "debug": true, "tools": "git"}', encoding="utf-8")

    config = ConfigStore(path).load()

    assert config.default_model == "gpt-5.2"
    assert config.debug is True
    assert config.tools is None
    assert QodoCli(config).build_args()[:2] == ["-m", "gpt-5.2"]


def test_non_object_json_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert ConfigStore(path).load() == QodoConfig()


def test_unknown_fields_are_not_preserved(tmp_path: Path) -> None:
    path = tmp_path / "qodo.json"
    path.write_text('{"somethingElse": 1, "theme": "light"}', encoding="utf-8")
    store = ConfigStore(path)

    store.save(store.load())

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["theme"] == "light"
    assert "somethingElse" not in saved


def test_save_creates_directory_and_writes_pretty_json(tmp_path: Path) -> None:
    path = tmp_path / "deep" / "er" / "qodo.json"
    store = ConfigStore(path)

    store.save(QodoConfig(default_model="gpt-5.1"))

    text = path.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert json.loads(text)["defaultModel"] == "gpt-5.1"


def test_save_failure_is_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = ConfigStore(blocker / "qodo.json")

    store.save(QodoConfig())

    assert not (blocker / "qodo.json").exists()


def test_coerce_value() -> None:
    assert coerce_value("true") is True
    assert coerce_value("false") is False
    assert coerce_value("rwx") == "rwx"


def test_set_value_persists_coerced_values(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "qodo.json")

    store.set_value("debug", "true")
    store.set_value("defaultModel", "gpt-5.2")
    store.set_value("tools", "git, shell")

    config = store.load()
    assert config.debug is True
    assert config.default_model == "gpt-5.2"
    assert config.tools == ["git", "shell"]


def test_set_value_rejects_unknown_key(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "qodo.json")

    with pytest.raises(UnknownConfigKeyError):
        store.set_value("colour", "blue")
    assert not store.path.exists()

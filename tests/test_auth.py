from __future__ import annotations

from pathlib import Path

import pytest

from qodo_bridge.auth import (
    QodoApiKey,
    create_api_key,
    get_api_key,
    is_authenticated,
    list_api_keys,
    parse_key_list,
    revoke_api_key,
    set_api_key,
)
from qodo_bridge.config import ConfigStore


def test_parse_key_list_pairs_name_and_created() -> None:
    output = "\n".join(
        [
            "Your keys:",
            "  Name: laptop",
            "  Created: 2025-01-01",
            "  Name: orphan",
            "  Name: ci",
            "  Created: 2025-02-02 10:00",
        ]
    )

    assert parse_key_list(output) == [
        QodoApiKey(name="laptop", created="2025-01-01"),
        QodoApiKey(name="ci", created="2025-02-02 10:00"),
    ]


def test_parse_key_list_ignores_trailing_name() -> None:
    assert parse_key_list("Name: last") == []
    assert parse_key_list("") == []


def test_list_api_keys_from_executable(fake_qodo: Path) -> None:
    keys = list_api_keys(str(fake_qodo))

    assert [key.name for key in keys] == ["laptop", "ci"]


def test_auth_queries_fail_closed(monkeypatch: pytest.MonkeyPatch, fake_qodo: Path, missing_qodo: Path) -> None:
    assert list_api_keys(str(missing_qodo)) == []
    assert is_authenticated(str(missing_qodo)) is False

    monkeypatch.setenv("FAKE_QODO_UNAUTHENTICATED", "1")
    assert list_api_keys(str(fake_qodo)) == []
    assert is_authenticated(str(fake_qodo)) is False


def test_create_and_revoke(fake_qodo: Path, missing_qodo: Path) -> None:
    assert create_api_key("new key", str(fake_qodo)) is True
    assert revoke_api_key("new key", str(fake_qodo)) is True
    assert create_api_key("new key", str(missing_qodo)) is False
    assert revoke_api_key("new key", str(missing_qodo)) is False


def test_stored_api_key_round_trip(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "qodo.json")
    assert get_api_key(store) is None

    set_api_key(store, "sk-123")

    assert get_api_key(store) == "sk-123"
    assert store.load().default_model == "claude-4.5-sonnet"

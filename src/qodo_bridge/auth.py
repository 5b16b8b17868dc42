"""API key queries through the qodo executable.

Every query fails closed: a missing executable or a non-zero exit reads as
"no keys" or "not authenticated".
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from qodo_bridge.cli_runner import DEFAULT_EXECUTABLE, run_sync
from qodo_bridge.config import ConfigStore

_NAME_RE = re.compile(r"Name:\s*(.+)")
_CREATED_RE = re.compile(r"Created:\s*(.+)")

log = logger.bind(service="qodo-auth")


@dataclass(frozen=True)
class QodoApiKey:
    name: str
    created: str


def parse_key_list(output: str) -> list[QodoApiKey]:
    """Pair each ``Name:`` line with a ``Created:`` line directly below it."""

    lines = output.splitlines()
    keys: list[QodoApiKey] = []
    for index, line in enumerate(lines):
        name_match = _NAME_RE.search(line)
        if name_match is None or index + 1 >= len(lines):
            continue
        created_match = _CREATED_RE.search(lines[index + 1])
        if created_match is None:
            continue
        keys.append(QodoApiKey(name=name_match.group(1).strip(), created=created_match.group(1).strip()))
    return keys


def list_api_keys(executable: str = DEFAULT_EXECUTABLE) -> list[QodoApiKey]:
    completed = run_sync(executable, "key", "list")
    if completed is None or completed.returncode != 0:
        return []
    return parse_key_list(completed.stdout)


def is_authenticated(executable: str = DEFAULT_EXECUTABLE) -> bool:
    completed = run_sync(executable, "key", "list")
    return completed is not None and completed.returncode == 0


def create_api_key(name: str, executable: str = DEFAULT_EXECUTABLE) -> bool:
    completed = run_sync(executable, "key", "create", name)
    created = completed is not None and completed.returncode == 0
    if not created:
        log.warning("auth.create_failed name={}", name)
    return created


def revoke_api_key(name: str, executable: str = DEFAULT_EXECUTABLE) -> bool:
    completed = run_sync(executable, "key", "revoke", name)
    revoked = completed is not None and completed.returncode == 0
    if not revoked:
        log.warning("auth.revoke_failed name={}", name)
    return revoked


def get_api_key(store: ConfigStore) -> str | None:
    return store.load().api_key


def set_api_key(store: ConfigStore, api_key: str) -> None:
    config = store.load()
    store.save(config.model_copy(update={"api_key": api_key}))

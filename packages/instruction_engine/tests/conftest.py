from __future__ import annotations

import pytest

_ENV_VARS = (
    "INSTRUCTION_BUDGET_LIMIT",
    "INSTRUCTION_SIZE_UNIT",
    "INSTRUCTION_AGENT_ID",
    "INSTRUCTION_SEPARATOR",
    "INSTRUCTION_TRUNCATION_MARKER",
    "INSTRUCTION_PERSONAL_DIR",
    "INSTRUCTION_ORGANIZATION_DIR",
)


@pytest.fixture(autouse=True)
def _clear_instruction_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)

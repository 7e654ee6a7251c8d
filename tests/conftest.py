from __future__ import annotations

import logging
from typing import Generator

import pytest

from versionkeeper.utils.console import reconfigure_console


@pytest.fixture(autouse=True)
def reset_output_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run outside CI and drop handlers bound to a finished test's streams."""
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    yield
    root_logger = logging.getLogger("versionkeeper")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    reconfigure_console()

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.solution_builder import SolutionBuilder


@pytest.fixture
def solution(tmp_path: Path) -> SolutionBuilder:
    """Provide a reusable solution builder rooted at the pytest tmp_path."""
    return SolutionBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_packmeta_logger():
    """Undo CLI logging configuration so caplog sees packmeta records."""
    yield
    logger = logging.getLogger("packmeta")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

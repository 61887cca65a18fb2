from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from carousel_engine import Card, CarouselState  # noqa: E402


@pytest.fixture
def make_deck():
    def _make(n: int) -> CarouselState:
        return CarouselState(cards=tuple(Card(front=f"Q{i}", back=f"A{i}") for i in range(n)))

    return _make

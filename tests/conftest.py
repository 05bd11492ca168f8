"""Shared fixtures: CSV files on disk and a scripted random source."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

import pytest

CHARITY_HEADER = "id,name,state,category,featured"
PROFILE_HEADER = "id,name,state,isMarried,hasChildren,hasPets,age"


def charity_rows() -> List[str]:
    """30 charities: 10 national, 14 NEW_YORK state, 4 CALIFORNIA state, 2 unfeatured."""
    rows = []
    categories = ["ANIMAL_RELATED", "HEALTH_CARE", "EDUCATION", "OTHER", "HUMAN_SERVICES"]
    for i in range(10):
        rows.append(f"{i + 1},National Charity {i + 1},TEXAS,{categories[i % 5]},NATIONAL")
    for i in range(14):
        rows.append(f"{i + 11},NY Charity {i + 1},NEW_YORK,{categories[i % 5]},STATE")
    for i in range(4):
        rows.append(f"{i + 25},CA Charity {i + 1},CALIFORNIA,{categories[i % 5]},STATE")
    rows.append("29,Unlisted One,OREGON,ANIMAL_RELATED,")
    rows.append("30,Unlisted Two,OREGON,OTHER,")
    return rows


def write_csv(path: Path, header: str, rows: Iterable[str]) -> str:
    path.write_text("\n".join([header, *rows]) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def charities_csv(tmp_path):
    return write_csv(tmp_path / "charities.csv", CHARITY_HEADER, charity_rows())


@pytest.fixture
def profile_with_pets_csv(tmp_path):
    return write_csv(
        tmp_path / "profile-with-pets.csv",
        PROFILE_HEADER,
        ["123,Test User,NEW_YORK,TRUE,FALSE,TRUE,35"],
    )


@pytest.fixture
def profile_no_pets_csv(tmp_path):
    return write_csv(
        tmp_path / "profile-no-pets.csv",
        PROFILE_HEADER,
        ["456,Other User,CALIFORNIA,FALSE,TRUE,FALSE,41"],
    )


class ScriptedRandom:
    """Deterministic RandomSource: scripted ints and coins, order-preserving draws."""

    def __init__(self, ints: Sequence[int] = (), coins: Sequence[bool] = ()) -> None:
        self.ints = list(ints)
        self.coins = list(coins)
        self.randint_calls: list[tuple[int, int]] = []

    def randint(self, low: int, high: int) -> int:
        self.randint_calls.append((low, high))
        value = self.ints.pop(0) if self.ints else low
        return max(low, min(high, value))

    def coin(self) -> bool:
        return self.coins.pop(0) if self.coins else True

    def sample(self, items, k):
        return list(items)[: max(0, k)]

    def shuffle(self, items):
        return list(items)


@pytest.fixture
def scripted():
    return ScriptedRandom

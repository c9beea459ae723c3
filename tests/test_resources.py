import pytest

from versecraft.domain.defs import CurrencyDef, PrimaryResourceDef
from versecraft.domain.resources import Progression, ResourcePool, Wallet


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        (PrimaryResourceDef(min=0, max=10), 10),
        (PrimaryResourceDef(min=-5, max=5), 0),
        (PrimaryResourceDef(min=0, max=10, start_at=4), 4),
        (PrimaryResourceDef(min=0, max=10, start_at=40), 10),
        (PrimaryResourceDef(min=0, max=10, start_at=-3), 0),
    ],
)
def test_seed_start_value(config: PrimaryResourceDef, expected: int) -> None:
    assert ResourcePool.seed(config).cur == expected


def test_heal_is_clamped_to_max() -> None:
    pool = ResourcePool(name="HP", min=0, max=10, cur=9)

    assert pool.apply_delta(5) == 10
    assert pool.cur == 10


def test_damage_is_clamped_to_min_and_exhausts() -> None:
    pool = ResourcePool(name="HP", min=0, max=10, cur=3)

    pool.apply_delta(-5)

    assert pool.cur == 0
    assert pool.is_exhausted()


def test_progression_levels_up_when_bar_fills() -> None:
    progression = Progression(xp=90, xp_max=100, level=1)

    gained = progression.apply_delta(25)

    assert gained == 1
    assert progression.level == 2
    assert progression.xp == 0


def test_progression_never_goes_negative() -> None:
    progression = Progression(xp=5)

    assert progression.apply_delta(-20) == 0
    assert progression.xp == 0
    assert progression.level == 1


def test_wallet_floors_at_zero() -> None:
    wallet = Wallet.seed(CurrencyDef(name="Coins", start_at=3))

    wallet.apply_delta(-10)

    assert wallet.amount == 0
    assert wallet.name == "Coins"

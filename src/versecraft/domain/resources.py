"""Primary resource pool and the story-independent progression track."""
from __future__ import annotations

from dataclasses import dataclass

from versecraft.domain.defs import CurrencyDef, PrimaryResourceDef

DEFAULT_XP_MAX = 100


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass(slots=True)
class ResourcePool:
    """Bounded survival meter (commonly HP) seeded from a story's module config."""

    name: str
    min: int
    max: int
    cur: int

    @classmethod
    def seed(cls, config: PrimaryResourceDef) -> "ResourcePool":
        """Build a pool at the configured starting value.

        Without an explicit start the pool starts full, except that meters whose
        floor is negative start at zero.
        """
        if config.start_at is not None:
            start = config.start_at
        else:
            start = 0 if config.min < 0 else config.max
        return cls(name=config.name, min=config.min, max=config.max, cur=clamp(start, config.min, config.max))

    def apply_delta(self, amount: int) -> int:
        """Shift the current value by amount, clamped to the bounds, and return it."""
        self.cur = clamp(self.cur + amount, self.min, self.max)
        return self.cur

    def is_exhausted(self) -> bool:
        return self.cur <= self.min


@dataclass(slots=True)
class Progression:
    """Global experience/level track retained across stories."""

    xp: int = 0
    xp_max: int = DEFAULT_XP_MAX
    level: int = 1

    def apply_delta(self, amount: int) -> int:
        """Add experience and return the number of levels gained.

        Experience is clamped to [0, xp_max]. Filling the bar grants a level and
        empties it again; any excess beyond xp_max is lost to the clamp.
        """
        self.xp = clamp(self.xp + amount, 0, self.xp_max)
        if amount > 0 and self.xp >= self.xp_max:
            self.level += 1
            self.xp = 0
            return 1
        return 0


@dataclass(slots=True)
class Wallet:
    """Secondary numeric resource (currency); never negative."""

    name: str
    amount: int = 0

    @classmethod
    def seed(cls, config: CurrencyDef) -> "Wallet":
        return cls(name=config.name, amount=max(0, config.start_at))

    def apply_delta(self, amount: int) -> int:
        self.amount = max(0, self.amount + amount)
        return self.amount

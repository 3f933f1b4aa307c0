"""Deterministic pseudo-random helpers used for stable variant partitions."""

MASK_32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK_32


def mulberry32_next(state: int) -> tuple[float, int]:
    """Advance a mulberry32 generator by one step.

    Args:
        state: Current 32-bit generator state (the seed for the first call).

    Returns:
        Tuple of (value in [0, 1), new state).
    """
    state = (state + 0x6D2B79F5) & MASK_32
    t = _imul(state ^ (state >> 15), 1 | state)
    t = ((t + _imul(t ^ (t >> 7), 61 | t)) & MASK_32) ^ t
    value = ((t ^ (t >> 14)) & MASK_32) / 4294967296
    return value, state


class SeededRandom:
    """Stateful wrapper around mulberry32_next."""

    def __init__(self, seed: int):
        self.state = seed & MASK_32

    def random(self) -> float:
        value, self.state = mulberry32_next(self.state)
        return value


def _utf16_units(s: str) -> list[int]:
    data = s.encode("utf-16-le")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def string_to_seed(s: str) -> int:
    """Polynomial rolling hash (h * 31 + c) over UTF-16 code units, made non-negative."""
    h = 0
    for unit in _utf16_units(s):
        h = ((h << 5) - h + unit) & MASK_32
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def seeded_shuffle(items, seed: int) -> list:
    """Fisher-Yates shuffle driven by mulberry32; same seed, same order."""
    rng = SeededRandom(seed)
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled

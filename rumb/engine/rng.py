"""
Seeded randomness shared by every generator.

The hash and the generator are bit-for-bit ports of the string hash and
mulberry32 used by the game client. Puzzle identity depends on them, so
any change here changes every published level.
"""
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF
GOLDEN_GAMMA = 0x6D2B79F5

RandomFn = Callable[[], float]


def _to_int32(value: int) -> int:
    value &= MASK_32
    return value - 0x100000000 if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK_32


def hash_string(value: str) -> int:
    """Order dependent 31x + c hash over UTF-16 code units, made non-negative"""
    result = 0
    encoded = value.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        result = _to_int32((result << 5) - result + code_unit)
    return abs(result)


def mulberry32(seed: int) -> RandomFn:
    """Return a generator of floats in [0, 1) for a 32-bit seed"""
    state = seed & MASK_32

    def next_float() -> float:
        nonlocal state
        state = (state + GOLDEN_GAMMA) & MASK_32
        result = _imul(state ^ (state >> 15), state | 1)
        result ^= (result + _imul(result ^ (result >> 7), result | 61)) & MASK_32
        return ((result ^ (result >> 14)) & MASK_32) / 4294967296

    return next_float


def rng_from_key(key: str) -> RandomFn:
    return mulberry32(hash_string(key))


def pick_random(items: Sequence[T], rng: RandomFn) -> T:
    return items[int(rng() * len(items))]

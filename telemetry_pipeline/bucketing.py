"""
Deterministic bucketing hash.

``simple_hash`` is the classic 31-multiplier polynomial string hash over
UTF-16 code units, wrapped to a signed 32-bit integer and made non-negative.
It matches Java's ``String.hashCode()`` up to the final absolute value, so
assignments can be reproduced by any client that speaks UTF-16.

Properties worth knowing before relying on it:

* It is not cryptographic. Collisions are easy to construct; for example
  "Aa" and "BB" hash to the same value, and so does any string built by
  swapping those blocks.
* With an odd multiplier the lowest bit of the hash is the parity of the sum
  of the code units. Two-way splits therefore depend only on that parity:
  over identities that differ in a varying numeric suffix the split is
  balanced (exactly 50/50 over 0..999), but a fixed population with skewed
  character parity would be skewed too.
* The absolute value maps -2**31 to 2**31, so results lie in [0, 2**31].
"""

from typing import List, Optional, Sequence

_MASK = 0xFFFFFFFF
_SIGN = 0x80000000


def simple_hash(text: str) -> int:
    """Non-negative 31-multiplier hash of ``text``."""
    data = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = (value * 31 + unit) & _MASK
    if value & _SIGN:
        value -= 1 << 32
    return abs(value)


def select_variant(test_name: str, identity: str, variants: Sequence[str]) -> Optional[str]:
    """Pick the variant for ``identity`` in ``test_name``.

    Returns:
        ``variants[hash(test_name + identity) % len(variants)]``, or None
        when there are no variants
    """
    if not variants:
        return None
    return variants[simple_hash(f"{test_name}{identity}") % len(variants)]


def bucket_counts(test_name: str, identities: Sequence[str], variants: Sequence[str]) -> List[int]:
    """How many of ``identities`` land in each variant, in variant order."""
    counts = [0] * len(variants)
    for identity in identities:
        counts[simple_hash(f"{test_name}{identity}") % len(variants)] += 1
    return counts

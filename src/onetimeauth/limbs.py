"""Little-endian word helpers for the 26-bit limb Poly1305 arithmetic.

Poly1305 reads its key and message as little-endian 32-bit words and splits
them into five 26-bit limbs. Python ints never overflow, so every helper
here masks explicitly to keep results inside 32 bits.
"""

MASK32 = 0xffffffff
LIMB_BITS = 26
LIMB_MASK = (1 << LIMB_BITS) - 1  # 0x3ffffff


def load32_le(data, offset: int = 0) -> int:
    """Decode 4 bytes starting at offset as an unsigned little-endian int."""
    chunk = data[offset:offset + 4]
    if len(chunk) != 4:
        raise ValueError(f"Need 4 bytes at offset {offset}, got {len(chunk)}")
    return int.from_bytes(chunk, 'little')


def store32_le(num: int) -> bytes:
    """Encode the low 32 bits of num as 4 little-endian bytes."""
    return (num & MASK32).to_bytes(4, 'little')


def add_with_carry(a: int, b: int, carry_in: int = 0) -> tuple:
    """32-bit addition with carry.

    Returns (sum mod 2^32, carry_out) where carry_out is 0 or 1 for
    32-bit inputs and a carry_in of 0 or 1.
    """
    s = (a & MASK32) + (b & MASK32) + carry_in
    return s & MASK32, s >> 32

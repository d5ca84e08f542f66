"""Tests for little-endian word helpers."""

import pytest
from onetimeauth.limbs import MASK32, LIMB_MASK, load32_le, store32_le, add_with_carry


class TestLoadStore:

    def test_load_little_endian(self):
        assert load32_le(b'\x01\x02\x03\x04') == 0x04030201

    def test_load_at_offset(self):
        data = b'\xaa\x78\x56\x34\x12\xbb'
        assert load32_le(data, 1) == 0x12345678

    def test_load_high_bit_is_unsigned(self):
        assert load32_le(b'\xff\xff\xff\xff') == MASK32

    def test_load_short_raises(self):
        with pytest.raises(ValueError):
            load32_le(b'\x01\x02\x03')
        with pytest.raises(ValueError):
            load32_le(b'\x01\x02\x03\x04', 1)

    def test_load_memoryview(self):
        assert load32_le(memoryview(b'\x00\x00\x00\x80')) == 0x80000000

    def test_store_little_endian(self):
        assert store32_le(0x04030201) == b'\x01\x02\x03\x04'
        assert store32_le(0) == b'\x00' * 4

    def test_store_truncates_to_32_bits(self):
        assert store32_le(0x1_0000_0001) == b'\x01\x00\x00\x00'

    def test_store_load_inverse(self, rng):
        for _ in range(20):
            x = rng.getrandbits(32)
            assert load32_le(store32_le(x)) == x

    def test_limb_mask_is_26_bits(self):
        assert LIMB_MASK == 0x3ffffff


class TestAddWithCarry:
    """Same cases as the original add-with-overflow checks."""

    def test_overflow_to_zero(self):
        assert add_with_carry(0xffffffff, 1) == (0, 1)

    def test_overflow_wraps(self):
        assert add_with_carry(0xffffffff, 2) == (1, 1)
        assert add_with_carry(0xffffffff, 0xffff) == (0xfffe, 1)

    def test_no_overflow(self):
        assert add_with_carry(1, 2) == (3, 0)
        assert add_with_carry(0x7fffffff, 0x80000000) == (0xffffffff, 0)

    def test_carry_in(self):
        assert add_with_carry(0xfffffffe, 1, 1) == (0, 1)
        assert add_with_carry(0xffffffff, 0xffffffff, 1) == (0xffffffff, 1)
        assert add_with_carry(5, 6, 1) == (12, 0)

    def test_matches_wide_addition(self, rng):
        for _ in range(50):
            a, b, c = rng.getrandbits(32), rng.getrandbits(32), rng.getrandbits(1)
            s, carry = add_with_carry(a, b, c)
            assert s + (carry << 32) == a + b + c
            assert carry in (0, 1)

"""Poly1305 one-time authenticator over GF(2^130 - 5).

The tag is a Wegman-Carter style polynomial MAC: 16-byte message blocks
(each with a marker byte appended) are the coefficients of a polynomial
evaluated at the clamped key half r, mod P = 2^130 - 5, and the other key
half is added as a one-time pad mod 2^128.

The accumulator is kept as five 26-bit limbs, the poly1305-donna 32-bit
layout, so that a single multiply step folds the part of the product above
2^130 back in with the factor 5 (2^130 = 5 mod P). Python ints never
overflow, so masks are applied explicitly wherever the limb layout relies
on 32-bit truncation.

A key must authenticate exactly one message. Instances are not thread-safe
for shared mutation; use clone() to fork a computation.
"""

import hmac
import logging

from onetimeauth.limbs import (
    MASK32, LIMB_BITS, LIMB_MASK,
    load32_le, store32_le, add_with_carry,
)

log = logging.getLogger(__name__)

P = (1 << 130) - 5
KEY_BYTES = 32
TAG_BYTES = 16
BLOCK_SIZE = 16

HIBIT = 1 << 24  # 2^128 expressed in the top limb


class InvalidKeyLength(ValueError):
    """The one-time key is not exactly KEY_BYTES long."""

    def __init__(self, length: int):
        super().__init__(f"Poly1305 requires a {KEY_BYTES}-byte key, got {length}")
        self.length = length


def _as_bytes(value, what: str):
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"Poly1305 {what} must be bytes-like, got {type(value).__name__}")
    return memoryview(value).cast('B')


class Poly1305:
    """A running Poly1305 computation under one 32-byte key.

    Feed data with update() any number of times, then call finish() once
    for the 16-byte tag.
    """

    __slots__ = ('_r', '_pad', '_h', '_buffer', '_leftover', '_final', '_finished')

    def __init__(self, key):
        key = _as_bytes(key, 'key')
        if len(key) != KEY_BYTES:
            raise InvalidKeyLength(len(key))

        # r clamped: top 4 bits of bytes 3,7,11,15 and low 2 bits of
        # bytes 4,8,12 cleared, already redistributed into 26-bit limbs
        self._r = (
            load32_le(key, 0) & 0x3ffffff,
            (load32_le(key, 3) >> 2) & 0x3ffff03,
            (load32_le(key, 6) >> 4) & 0x3ffc0ff,
            (load32_le(key, 9) >> 6) & 0x3f03fff,
            (load32_le(key, 12) >> 8) & 0x00fffff,
        )
        self._pad = tuple(load32_le(key, off) for off in range(16, 32, 4))

        self._h = [0, 0, 0, 0, 0]
        self._buffer = bytearray(BLOCK_SIZE)
        self._leftover = 0
        self._final = False
        self._finished = False
        log.debug("Poly1305 computation started")

    @property
    def finished(self) -> bool:
        return self._finished

    def _check_open(self):
        if self._finished:
            raise RuntimeError("Poly1305 computation already finished; keys are one-time")

    def _blocks(self, data):
        """Absorb whole 16-byte blocks into the accumulator."""
        n = len(data)
        if n < BLOCK_SIZE or n % BLOCK_SIZE:
            raise ValueError(f"Block input must be a positive multiple of {BLOCK_SIZE} bytes, got {n}")

        hibit = 0 if self._final else HIBIT
        r0, r1, r2, r3, r4 = self._r
        s1, s2, s3, s4 = r1 * 5, r2 * 5, r3 * 5, r4 * 5
        h0, h1, h2, h3, h4 = self._h

        for off in range(0, n, BLOCK_SIZE):
            # h += m
            h0 += load32_le(data, off) & LIMB_MASK
            h1 += (load32_le(data, off + 3) >> 2) & LIMB_MASK
            h2 += (load32_le(data, off + 6) >> 4) & LIMB_MASK
            h3 += (load32_le(data, off + 9) >> 6) & LIMB_MASK
            h4 += (load32_le(data, off + 12) >> 8) | hibit

            # h *= r
            d0 = h0 * r0 + h1 * s4 + h2 * s3 + h3 * s2 + h4 * s1
            d1 = h0 * r1 + h1 * r0 + h2 * s4 + h3 * s3 + h4 * s2
            d2 = h0 * r2 + h1 * r1 + h2 * r0 + h3 * s4 + h4 * s3
            d3 = h0 * r3 + h1 * r2 + h2 * r1 + h3 * r0 + h4 * s4
            d4 = h0 * r4 + h1 * r3 + h2 * r2 + h3 * r1 + h4 * r0

            # (partial) h %= p
            c = d0 >> LIMB_BITS
            h0 = d0 & LIMB_MASK
            d1 += c
            c = d1 >> LIMB_BITS
            h1 = d1 & LIMB_MASK
            d2 += c
            c = d2 >> LIMB_BITS
            h2 = d2 & LIMB_MASK
            d3 += c
            c = d3 >> LIMB_BITS
            h3 = d3 & LIMB_MASK
            d4 += c
            c = d4 >> LIMB_BITS
            h4 = d4 & LIMB_MASK
            h0 += c * 5
            c = h0 >> LIMB_BITS
            h0 &= LIMB_MASK
            h1 += c

        self._h = [h0, h1, h2, h3, h4]

    def update(self, message) -> 'Poly1305':
        """Append message bytes. Returns self so calls can be chained."""
        self._check_open()
        data = _as_bytes(message, 'message')
        n = len(data)

        if self._leftover:
            want = min(BLOCK_SIZE - self._leftover, n)
            self._buffer[self._leftover:self._leftover + want] = data[:want]
            self._leftover += want
            data = data[want:]
            n -= want
            if self._leftover < BLOCK_SIZE:
                return self
            self._blocks(self._buffer)
            self._leftover = 0

        if n >= BLOCK_SIZE:
            want = n - n % BLOCK_SIZE
            self._blocks(data[:want])
            data = data[want:]
            n -= want

        if n:
            self._buffer[:n] = data
            self._leftover = n
        return self

    def finish(self) -> bytes:
        """Absorb any partial block, reduce mod P, add the pad; return the tag."""
        self._check_open()
        log.debug("Finishing Poly1305 computation with %d buffered bytes", self._leftover)

        if self._leftover:
            i = self._leftover
            self._buffer[i] = 1
            self._buffer[i + 1:] = bytes(BLOCK_SIZE - i - 1)
            self._final = True
            self._blocks(self._buffer)
            self._leftover = 0

        h0, h1, h2, h3, h4 = self._h

        # fully carry h
        c = h1 >> LIMB_BITS
        h1 &= LIMB_MASK
        h2 += c
        c = h2 >> LIMB_BITS
        h2 &= LIMB_MASK
        h3 += c
        c = h3 >> LIMB_BITS
        h3 &= LIMB_MASK
        h4 += c
        c = h4 >> LIMB_BITS
        h4 &= LIMB_MASK
        h0 += c * 5
        c = h0 >> LIMB_BITS
        h0 &= LIMB_MASK
        h1 += c

        # g = h + -p
        g0 = h0 + 5
        c = g0 >> LIMB_BITS
        g0 &= LIMB_MASK
        g1 = h1 + c
        c = g1 >> LIMB_BITS
        g1 &= LIMB_MASK
        g2 = h2 + c
        c = g2 >> LIMB_BITS
        g2 &= LIMB_MASK
        g3 = h3 + c
        c = g3 >> LIMB_BITS
        g3 &= LIMB_MASK
        g4 = (h4 + c - (1 << LIMB_BITS)) & MASK32

        # select h if h < p, or g if h >= p, without branching on h
        mask = ((g4 >> 31) - 1) & MASK32
        g0 &= mask
        g1 &= mask
        g2 &= mask
        g3 &= mask
        g4 &= mask
        mask = ~mask & MASK32
        h0 = (h0 & mask) | g0
        h1 = (h1 & mask) | g1
        h2 = (h2 & mask) | g2
        h3 = (h3 & mask) | g3
        h4 = (h4 & mask) | g4

        # h %= 2^128, repacked as four 32-bit words
        w0 = (h0 | (h1 << 26)) & MASK32
        w1 = ((h1 >> 6) | (h2 << 20)) & MASK32
        w2 = ((h2 >> 12) | (h3 << 14)) & MASK32
        w3 = ((h3 >> 18) | (h4 << 8)) & MASK32

        # tag = (h + pad) mod 2^128
        w0, c = add_with_carry(w0, self._pad[0])
        w1, c = add_with_carry(w1, self._pad[1], c)
        w2, c = add_with_carry(w2, self._pad[2], c)
        w3, _ = add_with_carry(w3, self._pad[3], c)

        self._h = [h0, h1, h2, h3, h4]
        self._finished = True
        return store32_le(w0) + store32_le(w1) + store32_le(w2) + store32_le(w3)

    def clone(self) -> 'Poly1305':
        """Fork the computation. The copy shares no mutable state with self."""
        other = type(self).__new__(type(self))
        other._r = self._r
        other._pad = self._pad
        other._h = list(self._h)
        other._buffer = bytearray(self._buffer)
        other._leftover = self._leftover
        other._final = self._final
        other._finished = self._finished
        log.debug("Cloned Poly1305 computation with %d buffered bytes", self._leftover)
        return other

    __copy__ = clone


def _message_bytes(message):
    if isinstance(message, str):
        return message.encode('utf-8')
    return message


def onetime_auth(message, key) -> bytes:
    """Compute the 16-byte Poly1305 tag of message under a one-time key.

    A str message is authenticated as its UTF-8 encoding.
    """
    return Poly1305(key).update(_message_bytes(message)).finish()


def onetime_auth_verify(message, key, tag) -> bool:
    """Check tag against message in constant time.

    Returns False on mismatch, including a tag of the wrong length.
    """
    expected = onetime_auth(message, key)
    return hmac.compare_digest(expected, _as_bytes(tag, 'tag'))

# libu8.py - strict UTF-8 encoding, decoding and validation
# Copyright (C) 2021  Arusekk
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from enum import IntEnum

MAX_ASCII = 0x7f
MAX_BMP = 0xffff
MAX_UNICODE = 0x10ffff
SURROGATE_BEG = 0xd800
SURROGATE_END = 0xe000
BAD_CHAR = 0xffffffff


class U8(IntEnum):
    ascii, cont, start2, start3, start4, invalid = range(6)


SEQLEN = {U8.ascii: 1, U8.start2: 2, U8.start3: 3, U8.start4: 4}


class u8byte(int):
    """One byte of a UTF-8 buffer, classified by its high bits."""

    @property
    def type(self):
        if self < 0x80:
            return U8.ascii
        if self < 0xc0:
            return U8.cont
        if self < 0xe0:
            return U8.start2
        if self < 0xf0:
            return U8.start3
        if self < 0xf8:
            return U8.start4
        return U8.invalid

    @property
    def seqlen(self):
        """Total length of the sequence this byte starts, 0 if it starts none."""
        return SEQLEN.get(self.type, 0)

    @property
    def ascii(self):
        return self.type == U8.ascii

    @property
    def cont(self):
        return self.type == U8.cont

    @property
    def start(self):
        return U8.start2 <= self.type <= U8.start4


def is_surrogate(code):
    return SURROGATE_BEG <= code < SURROGATE_END


def is_valid(code):
    return 0 <= code <= MAX_UNICODE and not is_surrogate(code)


def eval_bytes(code):
    """Number of bytes in the shortest encoding of ``code``.

    [0x00, 0x7f]:         7 bits -> 0xxxxxxx
    [0x0080, 0x07ff]:    11 bits -> 110xxxxx 10xxxxxx
    [0x0800, 0xffff]:    16 bits -> 1110xxxx 10xxxxxx 10xxxxxx
    [0x010000, 0x10ffff]: 21 bits -> 11110xxx 10xxxxxx 10xxxxxx 10xxxxxx
    """
    if code <= MAX_ASCII:
        return 1
    if code <= 0x7ff:
        return 2
    if code <= MAX_BMP:
        return 3
    return 4


def leadmask(nbytes):
    """(marker, payload) masks of the leading byte of an nbytes sequence."""
    return (0xff00 >> nbytes) & 0xff, 0x7f >> nbytes


def _encode(code, dst):
    if code <= MAX_ASCII:
        dst.append(code)
        return

    nbytes = eval_bytes(code)
    high, low = leadmask(nbytes)
    shift = 6 * (nbytes - 1)    # 6, 12 or 18
    dst.append(high | (low & (code >> shift)))
    while shift:
        shift -= 6
        dst.append(0x80 | (0x3f & (code >> shift)))     # 10xxxxxx


def encode_into(code, dst):
    """Append the UTF-8 encoding of ``code`` to the bytearray ``dst``.

    Returns False, leaving ``dst`` alone, if ``code`` is above 0x10ffff
    or a surrogate.
    """
    if not is_valid(code):
        return False
    _encode(code, dst)
    return True


def encode(code):
    dst = bytearray()
    encode_into(code, dst)
    return bytes(dst)


def decode_step(bs, i):
    """Decode the code point starting at ``bs[i]``.

    Returns ``(code, i)`` with ``i`` one past the sequence, or ``BAD_CHAR``
    with ``i`` wherever decoding gave up. That offset is not the start of
    the bad sequence; callers wanting it must remember their own.
    """
    if not 0 <= i < len(bs):
        return BAD_CHAR, i

    c = u8byte(bs[i])
    i += 1
    if c.ascii:
        return int(c), i

    nbytes = c.seqlen
    if nbytes < 2 or len(bs) < i + nbytes - 1:
        return BAD_CHAR, i

    shift = 6 * (nbytes - 1)
    code = (c & leadmask(nbytes)[1]) << shift
    while shift:
        c = u8byte(bs[i])
        i += 1
        if not c.cont:
            return BAD_CHAR, i
        shift -= 6
        code |= (c & 0x3f) << shift

    # overlong forms either land in ascii or need fewer bytes
    if not is_valid(code) or code <= MAX_ASCII or nbytes != eval_bytes(code):
        return BAD_CHAR, i
    return code, i


def iter_chars(bs):
    """Yield ``(offset, code)`` for every code point of ``bs``.

    A malformed sequence is yielded once as ``(offset, BAD_CHAR)``, with
    ``offset`` at its first byte, and ends the iteration.
    """
    i = 0
    while i < len(bs):
        start = i
        code, i = decode_step(bs, i)
        yield start, code
        if code == BAD_CHAR:
            return


def decode_into(bs, dst):
    codes = []
    for _, code in iter_chars(bs):
        if code == BAD_CHAR:
            return False
        codes.append(code)
    dst.extend(codes)
    return True


def decode(bs):
    """All code points of ``bs``, or an empty list if it is not valid UTF-8."""
    codes = []
    if decode_into(bs, codes):
        return codes
    return []


def find_invalid(bs):
    """Offset of the first malformed sequence in ``bs``, None if valid."""
    for i, code in iter_chars(bs):
        if code == BAD_CHAR:
            return i
    return None


def validate(bs):
    return find_invalid(bs) is None


def is_ascii(bs):
    return all(c <= MAX_ASCII for c in bs)


def char_at(bs, index):
    """The ``index``-th code point of ``bs``, or None.

    Only the first ``index + 1`` code points are decoded, so bytes past
    them may still be malformed.
    """
    if index < 0:
        return None
    for count, (_, code) in enumerate(iter_chars(bs)):
        if code == BAD_CHAR:
            return None
        if count == index:
            return code
    return None


def char_count(bs):
    count = 0
    for _, code in iter_chars(bs):
        if code == BAD_CHAR:
            return None
        count += 1
    return count


def next_char(bs, i):
    """Decode one code point at cursor ``i``; returns ``(code, i)``.

    ``code`` is None at the end of ``bs`` (cursor unchanged) or on a
    malformed sequence (cursor advanced by an unspecified amount).
    """
    code, i = decode_step(bs, i)
    if code == BAD_CHAR:
        return None, i
    return code, i


def ascii_lower(bs):
    for i, c in enumerate(bs):
        if 0x41 <= c <= 0x5a:
            bs[i] = c + 32


def ascii_upper(bs):
    for i, c in enumerate(bs):
        if 0x61 <= c <= 0x7a:
            bs[i] = c - 32


def hexdump(bs, color=True, file=None):
    print(''.join(hexdump_iter(bs, color)), end='', file=file)


def hexdump_iter(bs, color=True):
    line = ["  "] * 16
    i = -1
    for i, x in enumerate(bs):
        x = u8byte(x)
        if color:
            line[i & 15] = f'\33[1;3{x.type + 1}m{x:02x}\33[m'
        else:
            line[i & 15] = f'{x:02x}'
        if i % 16 == 15:
            yield f'{i//16:07x}0 {" ".join(line)}\n'
            line = ["  "] * 16
    if (i + 1) % 16:
        yield f'{(i+1)//16:07x}0 {" ".join(line)}\n'

# libu16.py - UTF-16 bridge for libu8
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

import struct

from libu8 import BAD_CHAR, MAX_BMP, encode_into, is_surrogate, is_valid, iter_chars

HIGH_SURROGATE_END = 0xdc00
LOW_SURROGATE_END = 0xe000

_ORDER = {'little': '<', 'big': '>'}


def _encode_utf16(code, dst):
    if code <= MAX_BMP:
        dst.append(code)
    else:
        # U' = U - 0x10000 fits in 20 bits, split 10/10 over the pair
        code -= 0x10000
        dst.append(0xd800 | (code >> 10))       # 110110yy yyyyyyyy
        dst.append(0xdc00 | (code & 0x3ff))     # 110111xx xxxxxxxx


def encode_utf16_into(code, dst):
    if not is_valid(code):
        return False
    _encode_utf16(code, dst)
    return True


def encode_utf16(code):
    """UTF-16 code units of ``code``; empty if it is not a valid code point."""
    units = []
    encode_utf16_into(code, units)
    return units


def utf8_to_utf16(bs, dst):
    """Append the UTF-16 units of the UTF-8 buffer ``bs`` to ``dst``.

    Returns False, appending nothing, if ``bs`` is not valid UTF-8.
    """
    units = []
    for _, code in iter_chars(bs):
        if code == BAD_CHAR:
            return False
        _encode_utf16(code, units)
    dst.extend(units)
    return True


def utf16_to_utf8(units, dst):
    """Append the UTF-8 encoding of ``units`` to the bytearray ``dst``.

    Fails, appending nothing, on an unpaired surrogate or on a value that
    is not a 16-bit unit.
    """
    out = bytearray()
    i = 0
    while i < len(units):
        w0 = units[i]
        i += 1
        if not 0 <= w0 <= MAX_BMP:
            return False
        if not is_surrogate(w0):
            encode_into(w0, out)
            continue

        if w0 >= HIGH_SURROGATE_END or i == len(units):
            return False
        w1 = units[i]
        i += 1
        if not HIGH_SURROGATE_END <= w1 < LOW_SURROGATE_END:
            return False
        encode_into((((w0 & 0x3ff) << 10) | (w1 & 0x3ff)) + 0x10000, out)
    dst.extend(out)
    return True


def pack_utf16(units, byteorder='little'):
    return struct.pack(f'{_ORDER[byteorder]}{len(units)}H', *units)


def unpack_utf16(data, byteorder='little'):
    if len(data) % 2:
        return None
    return list(struct.unpack(f'{_ORDER[byteorder]}{len(data) // 2}H', data))

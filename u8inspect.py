#!/usr/bin/env python3

import os
import sys

from libu8 import ascii_lower, ascii_upper, hexdump, next_char
from libu16 import encode_utf16


def inspect(bs, verbose=0, utf16=False, file=None):
    print(f"got string: '{bs.decode(errors='backslashreplace')}'", file=file)

    valid = True
    i = oldi = 0
    while i < len(bs):
        code, i = next_char(bs, i)
        if code is None:
            valid = False
            break
        nbytes = i - oldi     # 1, 2, 3 or 4
        line = f'U+{code:x}, {nbytes} {"bytes" if nbytes > 1 else "byte"} long'
        if utf16:
            line += ', utf-16: ' + ' '.join(f'{w:04x}'
                                             for w in encode_utf16(code))
        if verbose:
            line += f' ({bs[oldi:i].hex(" ")})'
        print(line, file=file)
        oldi = i

    print(f'that is {"a valid" if valid else "an invalid"} utf-8 string',
          file=file)
    if not valid:
        # the decoder's own cursor is past the bad sequence by now
        print(f'error starts at index {oldi}', file=file)
    return valid


def main(argv=None):
    import argparse

    par = argparse.ArgumentParser(
        description='print the code points of a UTF-8 string')
    par.add_argument('words', nargs='*',
                     help='words to inspect, joined with spaces')
    par.add_argument('-i', '--infile', type=argparse.FileType('rb'),
                     help='inspect raw bytes read from a file instead')
    par.add_argument('-v', '--verbose', default=0, action='count')
    par.add_argument('-x', '--hexdump', action='store_true',
                     help='dump the input bytes coloured by UTF-8 byte class')
    par.add_argument('--no-color', dest='color', action='store_false',
                     help='do not colour the hexdump')
    par.add_argument('--utf16', action='store_true',
                     help='also print the UTF-16 code units of each character')
    case = par.add_mutually_exclusive_group()
    case.add_argument('--lower', action='store_true',
                      help='lowercase ASCII letters before inspecting')
    case.add_argument('--upper', action='store_true',
                      help='uppercase ASCII letters before inspecting')

    args = par.parse_args(argv)

    if args.infile is not None:
        with args.infile as fp:
            bs = bytearray(fp.read())
    else:
        # undecodable argv bytes come back as the raw bytes they were
        bs = bytearray(os.fsencode(' '.join(args.words)))

    if args.lower:
        ascii_lower(bs)
    elif args.upper:
        ascii_upper(bs)

    if args.hexdump or args.verbose > 1:
        hexdump(bs, args.color)

    inspect(bytes(bs), args.verbose, args.utf16)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#
# Command line driver for generating fused multiply-add reference vectors
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

'''Generate correctly-rounded fused multiply-add test vectors.

Usage:
    fmavec [-f FORMAT ...] [-o OUTPUT] [-v]

Tables are written for each chosen format in the order given, to OUTPUT or standard
output.
'''

import argparse
import sys
import time

from .values import FORMATS
from .vectors import emit_table


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='fmavec',
        description='Generate correctly-rounded fused multiply-add test vectors.'
    )
    parser.add_argument(
        '-f', '--format',
        dest='formats',
        action='append',
        choices=list(FORMATS),
        help='Format to generate; repeat for several (default: all)',
    )
    parser.add_argument(
        '-o', '--output',
        help='File to write (default: standard output)',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print progress information to standard error',
    )
    return parser.parse_args(argv)


def write_tables(names, file, *, verbose=False):
    '''Write a table for each named format and return the total number of rows.'''
    total = 0
    total_t0 = time.monotonic()

    for n, name in enumerate(names):
        if n:
            file.write('\n')
        t0 = time.monotonic()
        count = emit_table(FORMATS[name], file)
        elapsed = time.monotonic() - t0
        if verbose:
            print(f'  {name:10s}  {count:6d} rows  ({elapsed:.2f}s)', file=sys.stderr)
        total += count

    if verbose:
        print(f'\nTotal: {total} rows in {time.monotonic() - total_t0:.2f}s',
              file=sys.stderr)
    return total


def main(argv=None):
    args = parse_args(argv)
    names = args.formats or list(FORMATS)

    if args.output is None:
        write_tables(names, sys.stdout, verbose=args.verbose)
        return 0

    try:
        with open(args.output, 'w') as file:
            write_tables(names, file, verbose=args.verbose)
    except OSError as e:
        print(f'fmavec: cannot write {args.output}: {e}', file=sys.stderr)
        return 1
    if args.verbose:
        print(f'Vectors written to {args.output}', file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())

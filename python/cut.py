#!/usr/bin/env python3
"""
Name: cut
Description: select portions of each line of a file
License: perl
"""

import sys
import os
import argparse
from enum import Enum

__version__ = "0.1.0"

DIGITS = frozenset('0123456789')
MAX_DIGITS = len(str(sys.maxsize))


class PositionError(ValueError):
    """A byte/character/field list could not be parsed."""


class IllegalListValue(PositionError):
    def __init__(self, value):
        self.value = value
        super().__init__(f'illegal list value: "{value}"')


class DecreasingRange(PositionError):
    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(
            f"First number in range ({start}) must be lower than the second number ({end})"
        )


class DelimiterError(ValueError):
    def __init__(self, delimiter):
        self.delimiter = delimiter
        super().__init__(f'--delim "{delimiter}" must be a single byte')


class Mode(Enum):
    BYTES = 'bytes'
    CHARS = 'chars'
    FIELDS = 'fields'


def _is_numeric(token: str) -> bool:
    # str.isdigit() would also accept things like '²'
    return all(c in DIGITS for c in token)


def _positive(token: str, part: str) -> int:
    """
    Converts a 1-based number, rejecting zero, empty tokens and numbers
    too large to be an index.
    """
    if not token:
        raise IllegalListValue(part)
    digits = token.lstrip('0')
    if len(digits) > MAX_DIGITS:
        raise IllegalListValue(part)
    num = int(digits or '0')
    if num > sys.maxsize:
        raise IllegalListValue(part)
    if num == 0:
        raise IllegalListValue(token)
    return num


def parse_positions(list_str: str) -> list:
    """
    Parses a cut-style list string (e.g. "1,3,5-7") into zero-based,
    half-open ranges.

    Ranges come back in the order they were written; duplicates and
    overlaps are kept. 'N' becomes range(N-1, N) and 'N-M' becomes
    range(N-1, M). A single bad part rejects the whole list.
    """
    positions = []

    for part in list_str.split(','):
        start_str, dash, end_str = part.partition('-')

        if not _is_numeric(start_str):
            raise IllegalListValue(part)
        if dash and (not end_str or not _is_numeric(end_str)):
            raise IllegalListValue(part)

        start = _positive(start_str, part)
        if not dash:
            positions.append(range(start - 1, start))
            continue

        end = _positive(end_str, part)
        if start >= end:
            raise DecreasingRange(start, end)
        positions.append(range(start - 1, end))

    return positions


def _clamp(pos: range, length: int):
    """Returns the slice of a sequence of `length` items that `pos` covers, or None."""
    if pos.start >= length:
        return None
    return slice(pos.start, min(pos.stop, length))


def _select(seq, positions):
    for pos in positions:
        span = _clamp(pos, len(seq))
        if span is not None:
            yield seq[span]


def extract_bytes(line, positions) -> str:
    """
    Selects byte positions from a line. Slices that cut a multi-byte
    character in half come out as U+FFFD.
    """
    if isinstance(line, str):
        line = line.encode('utf-8')
    return b''.join(_select(line, positions)).decode('utf-8', errors='replace')


def extract_chars(line: str, positions) -> str:
    """Selects character positions from a line."""
    return ''.join(_select(line, positions))


def extract_fields(record: list, positions) -> list:
    """Selects whole fields from an already split record."""
    out_fields = []
    for chunk in _select(record, positions):
        out_fields.extend(chunk)
    return out_fields


def parse_delimiter(text: str) -> str:
    """Checks that the field delimiter is exactly one byte."""
    # One UTF-8 byte means one ASCII character; this also rejects the
    # surrogates argv uses for undecodable bytes.
    if len(text) != 1 or not text.isascii():
        raise DelimiterError(text)
    return text


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b'\r\n'):
        return line[:-2]
    if line.endswith(b'\n'):
        return line[:-1]
    return line


def cut_lines(stream, mode, positions, delimiter='\t'):
    """
    Runs every line of a binary stream through the extractor for `mode`,
    yielding one output string per line (without its line terminator).
    """
    for raw in stream:
        raw = _strip_eol(raw)

        if mode is Mode.BYTES:
            yield extract_bytes(raw, positions)
            continue

        line = raw.decode('utf-8', errors='replace')
        if mode is Mode.CHARS:
            yield extract_chars(line, positions)
        else:
            fields = line.split(delimiter)
            yield delimiter.join(extract_fields(fields, positions))


def cut_file(filepath, mode, positions, delimiter):
    """Prints the selected parts of one file, or of stdin for '-'."""
    if filepath == '-':
        stream = sys.stdin.buffer
        for out in cut_lines(stream, mode, positions, delimiter):
            print(out)
        return

    with open(filepath, 'rb') as f:
        for out in cut_lines(f, mode, positions, delimiter):
            print(out)


def main(argv=None):
    """Parses arguments and dispatches to the correct extractor."""
    parser = argparse.ArgumentParser(
        description="Select portions of each line of a file.",
        usage="%(prog)s [-b list | -c list | -f list] [-d delim] [file ...]"
    )
    parser.add_argument('-V', '--version', action='version',
                        version=f'%(prog)s {__version__}')

    # The main modes are mutually exclusive.
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument('-b', '--bytes', dest='byte_list', metavar='LIST',
                            help='The list specifies byte positions.')
    mode_group.add_argument('-c', '--chars', dest='char_list', metavar='LIST',
                            help='The list specifies character positions.')
    mode_group.add_argument('-f', '--fields', dest='field_list', metavar='LIST',
                            help='The list specifies fields.')

    parser.add_argument('-d', '--delim', '--delimiter', dest='delimiter', default='\t',
                        help="Use DELIM instead of TAB for field delimiter.")

    parser.add_argument('files', nargs='*', help='Files to process. Reads from stdin if none are given.')

    args = parser.parse_args(argv)
    program_name = os.path.basename(sys.argv[0])

    if args.byte_list is not None:
        mode, list_str = Mode.BYTES, args.byte_list
    elif args.char_list is not None:
        mode, list_str = Mode.CHARS, args.char_list
    else:
        mode, list_str = Mode.FIELDS, args.field_list

    try:
        delimiter = parse_delimiter(args.delimiter)
        positions = parse_positions(list_str)
    except ValueError as e:
        print(f"{program_name}: {e}", file=sys.stderr)
        return 1

    exit_status = 0
    for filepath in args.files or ['-']:
        if filepath != '-' and os.path.isdir(filepath):
            print(f"{program_name}: '{filepath}' is a directory", file=sys.stderr)
            exit_status = 1
            continue
        try:
            cut_file(filepath, mode, positions, delimiter)
        except BrokenPipeError:
            # The reader exited early (e.g. `cut -c1 file | head -1`).
            # Stop quietly; closing stderr silences the error Python
            # would print when flushing stdout at exit.
            sys.stderr.close()
            return exit_status
        except OSError as e:
            print(f"{program_name}: {filepath}: {e.strerror}", file=sys.stderr)
            exit_status = 1

    return exit_status


if __name__ == "__main__":
    sys.exit(main())

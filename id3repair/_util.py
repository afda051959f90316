# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

"""Utility functions for id3repair.

You should not rely on the interfaces here being stable. They are
intended for internal use in id3repair only.
"""

from contextlib import contextmanager

from id3repair._id3util import ID3TruncatedError


def read_full(fileobj, size):
    """Read exactly size bytes or raise ID3TruncatedError."""

    if size < 0:
        raise ValueError("Requested bytes ({}) less than zero".format(size))

    data = fileobj.read(size)
    if len(data) != size:
        raise ID3TruncatedError(
            "Read: {:d} Requested: {:d}".format(len(data), size))
    return data


def get_size(fileobj):
    """Returns the size of the file object. The position is left unchanged."""

    old_pos = fileobj.tell()
    try:
        fileobj.seek(0, 2)
        return fileobj.tell()
    finally:
        fileobj.seek(old_pos, 0)


@contextmanager
def preserve_position(fileobj):
    """Restores the file position on exit, whether or not the body raised."""

    pos = fileobj.tell()
    try:
        yield pos
    finally:
        fileobj.seek(pos, 0)


def copy_bytes(fout, fin, size, BUFFER_SIZE=2**16):
    """Copy exactly size bytes from fin to fout."""

    while size:
        data = read_full(fin, min(BUFFER_SIZE, size))
        fout.write(data)
        size -= len(data)


def copy_rest(fout, fin, BUFFER_SIZE=2**16):
    """Copy everything left in fin to fout. Returns the number of bytes."""

    total = 0
    buf = fin.read(BUFFER_SIZE)
    while buf:
        fout.write(buf)
        total += len(buf)
        buf = fin.read(BUFFER_SIZE)
    return total

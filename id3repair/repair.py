# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

"""Repair of broken ID3v2.3 tags.

A repair runs in two passes over the same tag. get_repair_size walks
the frames without writing anything and works out the size the tag
will have afterwards; repair_tag walks them again and writes the new
tag, starting with a header that carries that size. Both passes make
their per-frame decisions through FramePolicy, so the size written up
front always matches the frames that follow it.

Three things are repaired:

* APIC frames whose MIME type reads "ima ge/..." lose the stray byte
* with dedupe_apic, APIC frames repeating an earlier picture type are
  dropped, the first one in file order is kept
* with delete_frame, every frame of that type is dropped
"""

import os

from id3repair._id3util import (
    ID3MalformedFrameError, ID3RepairAssumptionError, ID3TagError)
from id3repair._util import read_full, get_size, copy_bytes, copy_rest
from id3repair.id3 import (
    FRAME_HEADER_SIZE, read_tag, iter_frame_headers, advance_past_frame)
from id3repair.apic import (
    SEPARATOR_OFFSET, SEPARATORS, MIME_CORRUPTED, MIME_MALFORMED,
    peek_picture_type, classify_mime)

KEEP, DELETE, DUPLICATE, REPAIR = range(4)


class RepairOptions(object):
    """What to repair besides broken APIC MIME types.

    Attributes:

    * dedupe_apic -- drop APIC frames with an already seen picture type
    * delete_frame -- four character frame ID (bytes) to drop, or None
    * verbose -- print a line for every dropped or repaired frame
    """

    def __init__(self, dedupe_apic=False, delete_frame=None, verbose=False):
        self.dedupe_apic = bool(dedupe_apic)
        self.delete_frame = self._frame_id(delete_frame)
        self.verbose = bool(verbose)

    @staticmethod
    def _frame_id(value):
        if value is None:
            return None
        if isinstance(value, str):
            value = value.encode('ascii')
        value = bytes(value)
        if len(value) != 4:
            raise ValueError(
                "frame type must be 4 characters, not {!r}".format(value))
        return value

    def __repr__(self):
        return "{}(dedupe_apic={!r}, delete_frame={!r}, verbose={!r})".format(
            type(self).__name__, self.dedupe_apic, self.delete_frame,
            self.verbose)


class FramePolicy(object):
    """Decides what happens to each frame during one pass.

    A policy remembers the picture types it has kept, so every pass
    needs a fresh one.
    """

    def __init__(self, options):
        self.options = options
        self.seen_types = set()

    def decide(self, fileobj, frame):
        """Returns KEEP, DELETE, DUPLICATE or REPAIR.

        fileobj has to be positioned at the start of the frame payload
        and is left there.
        """

        delete_frame = self.options.delete_frame
        if delete_frame is not None and frame.name == delete_frame:
            return DELETE

        if frame.name != b'APIC':
            return KEEP

        if self.options.dedupe_apic:
            pictype = peek_picture_type(fileobj, frame.size)
            if pictype in self.seen_types:
                return DUPLICATE
            self.seen_types.add(pictype)

        state = classify_mime(fileobj, frame.size)
        if state == MIME_MALFORMED:
            raise ID3MalformedFrameError(
                "APIC frame at {:#x} has an unterminated MIME type".format(
                    frame.offset))
        if state == MIME_CORRUPTED:
            return REPAIR
        return KEEP


def get_repair_size(fileobj, options=None, filename=None):
    """Work out the tag size after a repair, without writing anything.

    fileobj has to be positioned at the tag header. Returns None if
    nothing would change. Errors are raised; in that case the file
    must not be rewritten.
    """

    if options is None:
        options = RepairOptions()

    filesize = get_size(fileobj)
    tag = read_tag(fileobj, filename)
    size = tag.header.size
    policy = FramePolicy(options)

    for frame in iter_frame_headers(fileobj, tag):
        if frame.is_padding:
            break
        action = policy.decide(fileobj, frame)
        if action in (DELETE, DUPLICATE):
            size -= FRAME_HEADER_SIZE + frame.size
        elif action == REPAIR:
            size -= 1
        advance_past_frame(fileobj, frame, filesize)

    if size < 0:
        raise ID3TagError("frames are larger than the tag")
    if size == tag.header.size:
        return None
    return size


def _report(filename, what, frame):
    print("{} : {} {:08X} - {:08X}".format(
        filename, what, frame.offset, frame.end))


def _write_repaired_apic(fout, fin, frame):
    # encoding byte and the first three MIME characters
    head = SEPARATOR_OFFSET + 1
    fout.write(frame.to_bytes(frame.size - 1))
    copy_bytes(fout, fin, head)

    junk = read_full(fin, 1)
    if junk not in SEPARATORS:
        raise ID3RepairAssumptionError(
            "not [ima ge]. char is {!r} ({:02X}).".format(junk, junk[0]))

    copy_bytes(fout, fin, frame.size - head - 1)


def repair_tag(fin, fout, size, options=None, filename=None):
    """Write a repaired copy of the tag in fin, and everything after it.

    size is the new tag size as returned by get_repair_size. fin has
    to be positioned at the tag header; fout is only appended to.
    """

    if options is None:
        options = RepairOptions()
    if filename is None:
        filename = getattr(fin, 'name', '<stream>')

    tag = read_tag(fin, filename, quiet=True)
    fout.write(tag.header.to_bytes(size))
    if tag.extheader is not None:
        fout.write(tag.extheader.to_bytes())

    policy = FramePolicy(options)
    for frame in iter_frame_headers(fin, tag):
        if frame.is_padding:
            fout.write(frame.to_bytes())
            break

        action = policy.decide(fin, frame)
        if action in (DELETE, DUPLICATE):
            if options.verbose:
                _report(filename, "delete frame ({})".format(
                    frame.name.decode('latin1')), frame)
            advance_past_frame(fin, frame)
        elif action == REPAIR:
            if options.verbose:
                _report(filename, "repair APIC frame (ima ge->image)", frame)
            _write_repaired_apic(fout, fin, frame)
        else:
            fout.write(frame.to_bytes())
            copy_bytes(fout, fin, frame.size)

    # padding and the audio data
    copy_rest(fout, fin)


def repair(filename, options=None):
    """Repair the tag of a file in place.

    The original is kept as filename + '.bak'. Returns False if the
    file needed no repair, in which case nothing is touched.
    """

    with open(filename, 'rb') as fileobj:
        size = get_repair_size(fileobj, options, filename)
    if size is None:
        return False

    backup = filename + ".bak"
    os.rename(filename, backup)
    try:
        with open(backup, 'rb') as fin:
            with open(filename, 'wb') as fout:
                repair_tag(fin, fout, size, options, filename)
    except Exception:
        # the backup is the only good copy now
        try:
            os.unlink(filename)
        except EnvironmentError:
            pass
        raise
    return True

# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

"""Look-ahead inspection of APIC (attached picture) payloads.

An APIC payload is laid out as::

    Text encoding   $xx
    MIME type       <latin1 string> $00
    Picture type    $xx
    Description     <encoded string> $00 (00)
    Picture data    <binary data>

Some taggers wrote the MIME type as "ima\\x00ge/jpeg" (shown by most
tools as "ima ge/jpeg"): a stray separator sits at offset 3 of the
string. Everything in this module reads ahead from the start of a
payload and puts the stream back where it was, also on errors.
"""

from id3repair._id3util import (
    ID3MalformedFrameError, ID3UndefinedPictureTypeError)
from id3repair._util import read_full, preserve_position

MIMETYPE_MAXSIZE = 64
"""Longest MIME type accepted, including the terminator."""

SEPARATOR_OFFSET = 3
"""Offset of the injected separator inside the MIME type."""

SEPARATORS = b'\x00 '

MIME_OK, MIME_CORRUPTED, MIME_MALFORMED = range(3)

PICTURE_TYPES = [
    "Other",
    "32x32 pixels 'file icon' (PNG only)",
    "Other file icon",
    "Cover (front)",
    "Cover (back)",
    "Leaflet page",
    "Media (e.g. label side of CD)",
    "Lead artist/lead performer/soloist",
    "Artist/performer",
    "Conductor",
    "Band/Orchestra",
    "Composer",
    "Lyricist/text writer",
    "Recording Location",
    "During recording",
    "During performance",
    "Movie/video screen capture",
    "A bright coloured fish",
    "Illustration",
    "Band/artist logotype",
    "Publisher/Studio logotype",
]
"""Picture type names, indexed by picture type code."""


def _mime_limit(size):
    # the encoding byte comes first
    if size is None:
        return MIMETYPE_MAXSIZE
    return max(0, min(MIMETYPE_MAXSIZE, size - 1))


def _read_mime(fileobj, limit):
    """Read a MIME type, leaving the stream after its terminator.

    At most limit bytes (terminator included) are read. Returns the
    raw string and whether a separator sits at SEPARATOR_OFFSET.
    """

    head = read_full(fileobj, min(SEPARATOR_OFFSET + 1, limit))
    index = head.find(b'\x00', 0, SEPARATOR_OFFSET)
    if index != -1:
        fileobj.seek(index + 1 - len(head), 1)
        return head[:index], False

    if len(head) <= SEPARATOR_OFFSET:
        raise ID3MalformedFrameError("APIC frame too short for its MIME type")

    corrupted = head[SEPARATOR_OFFSET] in SEPARATORS
    mime = bytearray(head)
    count = len(head)
    while True:
        if count >= limit:
            raise ID3MalformedFrameError(
                "MIME type not terminated within {} bytes".format(limit))
        char = read_full(fileobj, 1)
        count += 1
        if char == b'\x00':
            break
        mime += char
    return bytes(mime), corrupted


def peek_picture_type(fileobj, size=None):
    """Returns the picture type code of the APIC payload at the cursor.

    size is the payload length, if known; it bounds the MIME scan.
    """

    with preserve_position(fileobj) as start:
        read_full(fileobj, 1)
        _read_mime(fileobj, _mime_limit(size))
        if size is not None and fileobj.tell() - start >= size:
            raise ID3MalformedFrameError("APIC frame has no picture type")
        pictype = read_full(fileobj, 1)[0]

    if pictype >= len(PICTURE_TYPES):
        raise ID3UndefinedPictureTypeError(
            "This APIC type ({:02X}) is undefined.".format(pictype))
    return pictype


def classify_mime(fileobj, size=None):
    """Returns MIME_OK, MIME_CORRUPTED or MIME_MALFORMED.

    Only the byte at SEPARATOR_OFFSET is looked at; the "image"
    prefix is not verified.
    """

    with preserve_position(fileobj):
        read_full(fileobj, 1)
        try:
            corrupted = _read_mime(fileobj, _mime_limit(size))[1]
        except ID3MalformedFrameError:
            return MIME_MALFORMED

    if corrupted:
        return MIME_CORRUPTED
    return MIME_OK

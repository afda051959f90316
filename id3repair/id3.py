# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

"""Structural decoding of ID3v2.3 tags.

Only the fixed layout parts of a tag are decoded here: the tag header,
the optional extended header and the frame headers. Frame payloads are
never interpreted; callers skip or copy them by size.

See http://id3.org/id3v2.3.0 for the layout.
"""

import struct

from warnings import warn

from id3repair._id3util import (
    ID3NoHeaderError, ID3UnsupportedVersionError, ID3TruncatedError,
    ID3CRCUnsupportedError, ID3TagError, ID3Warning, BitPaddedInt,
    decode_be32, encode_be32, decode_synchsafe, encode_synchsafe)
from id3repair._util import read_full

HEADER_SIZE = 10
FRAME_HEADER_SIZE = 10
EXTHEADER_MIN_SIZE = 6


class ID3Header(object):
    """The 10 byte tag header.

    Attributes:

    * version -- (major, revision) tuple, e.g. (3, 0)
    * flags -- the raw flag byte
    * size -- tag size after the header (extended header, frames and
      padding), decoded from its synchsafe form
    * raw_size -- the size field as stored, if read from a file
    """

    def __init__(self, id3=b'ID3', version=(3, 0), flags=0, size=0,
                 raw_size=None):
        self.id3 = id3
        self.version = version
        self.flags = flags
        self.size = size
        self.raw_size = raw_size

    @classmethod
    def read(cls, fileobj):
        data = read_full(fileobj, HEADER_SIZE)
        id3, vmaj, vrev, flags, raw_size = struct.unpack('>3sBBBI', data)
        return cls(id3, (vmaj, vrev), flags, decode_synchsafe(raw_size),
                   raw_size)

    def check(self, filename=None):
        """Raise unless this is an ID3v2.3 header."""

        fn = filename or "<stream>"
        if self.id3 != b'ID3':
            raise ID3NoHeaderError(
                "'{}' doesn't start with an ID3 tag".format(fn))
        if self.version[0] != 3:
            raise ID3UnsupportedVersionError(
                "'{}' ID3v2.{} not supported".format(fn, self.version[0]))

    def to_bytes(self, size=None):
        """Serialize the header, optionally with a replacement size."""

        if size is None:
            size = self.size
        vmaj, vrev = self.version
        return struct.pack('>3sBBBI', self.id3, vmaj, vrev, self.flags,
                           encode_synchsafe(size))

    f_unsynch = property(lambda s: bool(s.flags & 0x80))
    f_extended = property(lambda s: bool(s.flags & 0x40))
    f_experimental = property(lambda s: bool(s.flags & 0x20))

    @property
    def f_valid_size(self):
        """The high bit of every size byte is clear."""

        return (self.raw_size is None or
                BitPaddedInt.has_valid_padding(self.raw_size))

    def __repr__(self):
        return "{}(version={!r}, flags={:#04x}, size={})".format(
            type(self).__name__, self.version, self.flags, self.size)


class ID3ExtendedHeader(object):
    """The optional v2.3 extended header.

    'size' excludes the size field itself and is 6 (no CRC) or 10
    (with CRC). Bytes beyond the six known ones are kept in 'extra'
    and written back untouched.
    """

    FLAG_CRC = 0x8000

    def __init__(self, size=EXTHEADER_MIN_SIZE, flags=0, padding_size=0,
                 extra=b''):
        self.size = size
        self.flags = flags
        self.padding_size = padding_size
        self.extra = extra

    @classmethod
    def read(cls, fileobj):
        size = decode_be32(read_full(fileobj, 4))
        if size < EXTHEADER_MIN_SIZE:
            raise ID3TagError(
                "extended header size {} is too small".format(size))
        data = read_full(fileobj, size)
        flags, padding_size = struct.unpack('>HI', data[:6])
        return cls(size, flags, padding_size, data[6:])

    f_crc = property(lambda s: bool(s.flags & s.FLAG_CRC))

    def check(self):
        if self.f_crc:
            raise ID3CRCUnsupportedError(
                "extended header CRC is not supported")

    def to_bytes(self):
        return (encode_be32(self.size) + struct.pack('>H', self.flags) +
                encode_be32(self.padding_size) + self.extra)

    def __repr__(self):
        return "{}(size={}, flags={:#06x}, padding_size={})".format(
            type(self).__name__, self.size, self.flags, self.padding_size)


class ID3FrameHeader(object):
    """A 10 byte frame header; 'size' counts the payload only."""

    def __init__(self, name, size, flags, offset=None):
        self.name = name
        self.size = size
        self.flags = flags
        self.offset = offset

    @classmethod
    def read(cls, fileobj):
        offset = fileobj.tell()
        data = read_full(fileobj, FRAME_HEADER_SIZE)
        name, size, flags = struct.unpack('>4sIH', data)
        return cls(name, size, flags, offset)

    is_padding = property(lambda s: s.name[:1] == b'\x00',
                          doc="the header is the start of the padding")

    @property
    def end(self):
        """File offset of the first byte after the payload."""

        return self.offset + FRAME_HEADER_SIZE + self.size

    def to_bytes(self, size=None):
        if size is None:
            size = self.size
        return self.name + encode_be32(size) + struct.pack('>H', self.flags)

    def __repr__(self):
        return "{}({!r}, size={}, flags={:#06x})".format(
            type(self).__name__, self.name, self.size, self.flags)


class ID3Tag(object):
    """The decoded fixed part of a tag and where it sits in the stream.

    Attributes:

    * header -- ID3Header
    * extheader -- ID3ExtendedHeader or None
    * offset -- stream offset of the tag header
    """

    def __init__(self, header, extheader=None, offset=0):
        self.header = header
        self.extheader = extheader
        self.offset = offset

    @property
    def padding_size(self):
        if self.extheader is None:
            return 0
        return self.extheader.padding_size

    @property
    def frames_end(self):
        """Stream offset where frame data ends and padding begins."""

        return (self.offset + HEADER_SIZE + self.header.size -
                self.padding_size)


def read_tag_header(fileobj):
    return ID3Header.read(fileobj)


def read_extended_header(fileobj):
    extheader = ID3ExtendedHeader.read(fileobj)
    extheader.check()
    return extheader


def read_frame_header(fileobj):
    return ID3FrameHeader.read(fileobj)


def advance_past_frame(fileobj, frame, filesize=None):
    """Seek over the payload of frame.

    If filesize is given, a payload running past the end of the
    stream raises ID3TruncatedError.
    """

    if filesize is not None and frame.end > filesize:
        raise ID3TruncatedError(
            "{} frame at {:#x} ends past the end of the file".format(
                frame.name.decode('latin1'), frame.offset))
    fileobj.seek(frame.size, 1)


def read_tag(fileobj, filename=None, quiet=False):
    """Decode and validate the tag header and extended header.

    The stream is left positioned at the first frame header. Unless
    quiet is set, oddities that do not stop a repair are reported
    with ID3Warning.
    """

    offset = fileobj.tell()
    header = read_tag_header(fileobj)
    header.check(filename)
    fn = filename or "<stream>"
    if not quiet and not header.f_valid_size:
        warn("'{}' has high bits set in the tag size {:#010x}, they are "
             "ignored".format(fn, header.raw_size), ID3Warning)
    if not quiet and header.f_unsynch:
        warn("'{}' has the unsynchronisation flag set, frames are "
             "handled as raw bytes".format(fn),
             ID3Warning)
    extheader = None
    if header.f_extended:
        extheader = read_extended_header(fileobj)
    return ID3Tag(header, extheader, offset)


def iter_frame_headers(fileobj, tag):
    """Yield frame headers up to and including the padding signal.

    The consumer has to move the stream past each payload (skip or
    copy it) before asking for the next header. Iteration also ends
    when less than a frame header fits before the end of the frame
    area.
    """

    end = tag.frames_end
    while end - fileobj.tell() >= FRAME_HEADER_SIZE:
        frame = read_frame_header(fileobj)
        yield frame
        if frame.is_padding:
            return

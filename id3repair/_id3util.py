# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

import struct


class error(Exception):
    pass


class ID3NoHeaderError(error, ValueError):
    pass


class ID3UnsupportedVersionError(error, NotImplementedError):
    pass


class ID3TruncatedError(error, EOFError):
    pass


class ID3CRCUnsupportedError(error, NotImplementedError):
    pass


class ID3TagError(error, ValueError):
    pass


class ID3MalformedFrameError(error, ValueError):
    pass


class ID3UndefinedPictureTypeError(error, ValueError):
    pass


class ID3RepairAssumptionError(error, ValueError):
    pass


class ID3Warning(error, UserWarning):
    pass


class BitPaddedInt(int):
    def __new__(cls, value, bits=7, bigendian=True):
        "Strips 8-bits bits out of every byte"
        mask = (1 << (bits)) - 1
        if isinstance(value, int):
            reformed_bytes = []
            while value:
                reformed_bytes.append(value & mask)
                value = value >> 8
        elif isinstance(value, bytes):
            reformed_bytes = [b & mask for b in value]
            if bigendian:
                reformed_bytes.reverse()
        else:
            raise TypeError

        numeric_value = 0
        for shift, byte in zip(range(0, len(reformed_bytes) * bits, bits),
                               reformed_bytes):
            numeric_value += byte << shift

        self = int.__new__(BitPaddedInt, numeric_value)
        self.bits = bits
        self.bigendian = bigendian
        return self

    @staticmethod
    def to_bytes(value, bits=7, bigendian=True, width=4):
        bits = getattr(value, 'bits', bits)
        bigendian = getattr(value, 'bigendian', bigendian)
        value = int(value)
        if value < 0:
            raise ValueError('Negative values are not representable')
        mask = (1 << bits) - 1

        index = 0
        bytes_ = bytearray(width)
        try:
            while value:
                bytes_[index] = value & mask
                value >>= bits
                index += 1
        except IndexError:
            raise ValueError('Value too wide (>%d bytes)' % width)

        if bigendian:
            bytes_.reverse()
        return bytes(bytes_)

    @staticmethod
    def has_valid_padding(value, bits=7):
        """Whether the padding bits are all zero"""

        assert bits <= 8

        mask = (((1 << (8 - bits)) - 1) << bits)

        if isinstance(value, int):
            while value:
                if value & mask:
                    return False
                value >>= 8
        elif isinstance(value, bytes):
            for byte in value:
                if byte & mask:
                    return False
        else:
            raise TypeError

        return True


SYNCHSAFE_MAX = (1 << 28) - 1
"""Largest size a 4 byte synchsafe integer can carry."""


def decode_synchsafe(value):
    """Unpack a 32 bit integer holding four 7 bit groups into 28 bits.

    The high bit of every byte is ignored.
    """

    return int(BitPaddedInt(value & 0xFFFFFFFF))


def encode_synchsafe(value):
    """Spread a 28 bit integer over four 7 bit groups.

    Raises ID3TagError for values that do not fit instead of
    silently dropping the high bits.
    """

    if not 0 <= value <= SYNCHSAFE_MAX:
        raise ID3TagError(
            "size {:#x} does not fit a synchsafe integer".format(value))
    return struct.unpack('>I', BitPaddedInt.to_bytes(value, width=4))[0]


def decode_be32(data):
    return struct.unpack('>I', data)[0]


def encode_be32(value):
    try:
        return struct.pack('>I', value)
    except struct.error as err:
        raise ID3TagError(str(err))

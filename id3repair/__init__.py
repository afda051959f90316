# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.


"""id3repair fixes a few kinds of damage in ID3v2.3 tags.

::

    from id3repair import RepairOptions, repair
    repair(filename, RepairOptions(dedupe_apic=True))

The tag is rewritten with a corrected size, everything else in the
file is copied as it is. The original file is kept next to it with a
'.bak' suffix.
"""

version = (1, 0)
"""Version tuple."""

version_string = '.'.join(str(v) for v in version)
"""Version string."""


from id3repair._id3util import (
    error, ID3NoHeaderError, ID3UnsupportedVersionError, ID3TruncatedError,
    ID3CRCUnsupportedError, ID3TagError, ID3MalformedFrameError,
    ID3UndefinedPictureTypeError, ID3RepairAssumptionError, ID3Warning)
from id3repair.repair import (
    RepairOptions, get_repair_size, repair_tag, repair)

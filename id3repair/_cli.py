# -*- coding: utf-8 -*-

# Copyright (C) 2011  gbm
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

"""Command line front end, installed as 'id3repair'."""

import sys

from optparse import OptionParser

from id3repair import version_string
from id3repair._id3util import error
from id3repair.repair import RepairOptions, repair


def make_parser():
    parser = OptionParser(
        usage="%prog [options] filename ...",
        version="%prog " + version_string,
        description=("Repair APIC frames whose MIME type reads "
                     "'ima ge/...' in ID3v2.3 tags. The original file "
                     "is kept with a .bak suffix."))
    parser.add_option(
        "-r", "--repetition", action="store_true", dest="repetition",
        default=False,
        help="When APIC frame comes out two times or more, it is deleted.")
    parser.add_option(
        "-d", "--delete", metavar="FRAMETYPE", dest="delete",
        help="All frames of a specified type are deleted.")
    parser.add_option(
        "-v", "--verbose", action="store_true", dest="verbose",
        default=False, help="Verbose mode.")
    return parser


def main(argv=None):
    parser = make_parser()
    options, args = parser.parse_args(argv)
    if not args:
        parser.error("no files given")

    try:
        repair_options = RepairOptions(
            dedupe_apic=options.repetition, delete_frame=options.delete,
            verbose=options.verbose)
    except ValueError as err:
        parser.error(str(err))

    status = 0
    for filename in args:
        try:
            repair(filename, repair_options)
        except (error, EnvironmentError) as err:
            print("{}: {}".format(filename, err), file=sys.stderr)
            status = 1
    return status


def entry_point():
    sys.exit(main())

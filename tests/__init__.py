# -*- coding: utf-8 -*-

import glob
import os
import struct
import sys
import unittest

from unittest import TestCase

suites = []
add = suites.append


class Result(unittest.TextTestResult):

    separator1 = '=' * 70
    separator2 = '-' * 70

    def addSuccess(self, test):
        unittest.TestResult.addSuccess(self, test)
        sys.stdout.write('.')

    def addError(self, test, err):
        unittest.TestResult.addError(self, test, err)
        sys.stdout.write('E')

    def addFailure(self, test, err):
        unittest.TestResult.addFailure(self, test, err)
        sys.stdout.write('F')

    def printErrors(self):
        succ = self.testsRun - (len(self.errors) + len(self.failures))
        v = "%3d" % succ
        count = 50 - self.testsRun
        sys.stdout.write((" " * count) + v + "\n")
        self.printErrorList('ERROR', self.errors)
        self.printErrorList('FAIL', self.failures)

    def printErrorList(self, flavour, errors):
        for test, err in errors:
            sys.stdout.write(self.separator1 + "\n")
            sys.stdout.write("%s: %s\n" % (flavour, str(test)))
            sys.stdout.write(self.separator2 + "\n")
            sys.stdout.write("%s\n" % err)


class Runner(object):
    def run(self, test):
        suite = unittest.defaultTestLoader.loadTestsFromTestCase(test)
        pref = "%s (%d): " % (test.__name__, suite.countTestCases())
        print(pref + " " * (25 - len(pref)), end="")
        result = Result(sys.stdout, True, 1)
        suite(result)
        result.printErrors()
        return bool(result.failures + result.errors)


def unit(run=[]):
    for fn in glob.glob(os.path.join(os.path.dirname(__file__), "test_*.py")):
        __import__("tests." + os.path.basename(fn)[:-3], {}, {}, [])

    runner = Runner()
    failures = 0
    count = 0
    for test in sorted(suites, key=lambda s: s.__name__):
        if not run or test.__name__ in run:
            count += 1
            failures += runner.run(test)
    return count, failures


# Tag building helpers shared by the test modules.


def make_frame(name, payload, flags=0):
    return name + struct.pack('>IH', len(payload), flags) + payload


def make_apic(mime=b'image/jpeg', pictype=3, desc=b'', data=b'\xff\xd8\xff',
              encoding=0):
    return (bytes((encoding,)) + mime + b'\x00' + bytes((pictype,)) +
            desc + b'\x00' + data)


def make_extheader(padding_size=0, flags=0, extra=b''):
    return struct.pack('>IHI', 6 + len(extra), flags, padding_size) + extra


def synchsafe(value):
    return bytes((value >> 21 & 0x7f, value >> 14 & 0x7f,
                  value >> 7 & 0x7f, value & 0x7f))


def make_tag(frames=b'', padding=0, flags=0, extheader=b'', version=3,
             size=None):
    body = extheader + frames + b'\x00' * padding
    if size is None:
        size = len(body)
    return b'ID3' + bytes((version, 0, flags)) + synchsafe(size) + body

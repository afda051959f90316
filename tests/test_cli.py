import io
import os

from contextlib import redirect_stdout, redirect_stderr
from tempfile import mkstemp

from tests import TestCase, add, make_frame, make_apic, make_tag

from id3repair._cli import main, make_parser

BAD_APIC = make_apic(mime=b'ima ge/jpeg', pictype=3, data=b'\xd8' * 15)
GOOD_APIC = make_apic(mime=b'image/jpeg', pictype=3, data=b'\xd8' * 15)


class CommandLine(TestCase):

    def setUp(self):
        fd, self.filename = mkstemp(suffix='.mp3')
        os.close(fd)
        self.backup = self.filename + ".bak"

    def tearDown(self):
        for name in [self.filename, self.backup]:
            if os.path.exists(name):
                os.unlink(name)

    def _write(self, data):
        with open(self.filename, 'wb') as h:
            h.write(data)

    def _read(self):
        with open(self.filename, 'rb') as h:
            return h.read()

    def _main(self, args):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = main(args)
        return status, out.getvalue(), err.getvalue()

    def test_parser(self):
        options, args = make_parser().parse_args(
            ["-r", "-d", "TIT2", "-v", "a.mp3"])
        self.assertTrue(options.repetition)
        self.assertEqual(options.delete, "TIT2")
        self.assertTrue(options.verbose)
        self.assertEqual(args, ["a.mp3"])

    def test_long_options(self):
        options, args = make_parser().parse_args(
            ["--repetition", "--delete=TALB", "--verbose", "a.mp3"])
        self.assertTrue(options.repetition)
        self.assertEqual(options.delete, "TALB")
        self.assertTrue(options.verbose)

    def test_repair(self):
        self._write(make_tag(make_frame(b'APIC', BAD_APIC), padding=20))
        status, out, err = self._main([self.filename])
        self.assertEqual(status, 0)
        self.assertEqual(out, "")
        self.assertEqual(self._read(),
                         make_tag(make_frame(b'APIC', GOOD_APIC), padding=20))
        self.assertTrue(os.path.exists(self.backup))

    def test_verbose(self):
        tit2 = make_frame(b'TIT2', b'\x00abcd')
        self._write(make_tag(tit2 + make_frame(b'APIC', BAD_APIC), padding=20))
        status, out, err = self._main(["-v", "-d", "TIT2", self.filename])
        self.assertEqual(status, 0)
        self.assertEqual(out.splitlines(), [
            "%s : delete frame (TIT2) 0000000A - 00000019" % self.filename,
            "%s : repair APIC frame (ima ge->image) 00000019 - 00000041" %
            self.filename,
        ])

    def test_no_change(self):
        data = make_tag(make_frame(b'APIC', GOOD_APIC), padding=20)
        self._write(data)
        status, out, err = self._main([self.filename])
        self.assertEqual(status, 0)
        self.assertEqual(self._read(), data)
        self.assertFalse(os.path.exists(self.backup))

    def test_not_id3(self):
        data = b'\xff\xfb\x90\x64' * 10
        self._write(data)
        status, out, err = self._main([self.filename])
        self.assertEqual(status, 1)
        self.assertIn(self.filename, err)
        self.assertEqual(self._read(), data)

    def test_missing_file(self):
        os.unlink(self.filename)
        status, out, err = self._main([self.filename])
        self.assertEqual(status, 1)
        self.assertIn(self.filename, err)

    def test_continues_after_failure(self):
        self._write(make_tag(make_frame(b'APIC', BAD_APIC), padding=20))
        missing = self.filename + ".missing"
        status, out, err = self._main([missing, self.filename])
        self.assertEqual(status, 1)
        self.assertEqual(self._read(),
                         make_tag(make_frame(b'APIC', GOOD_APIC), padding=20))

    def test_no_files(self):
        with redirect_stderr(io.StringIO()):
            try:
                main([])
            except SystemExit as err:
                self.assertEqual(err.code, 2)
            else:
                self.fail("no usage error")

    def test_bad_frame_type(self):
        with redirect_stderr(io.StringIO()):
            try:
                main(["-d", "TOOLONG", self.filename])
            except SystemExit as err:
                self.assertEqual(err.code, 2)
            else:
                self.fail("no usage error")


add(CommandLine)

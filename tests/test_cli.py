import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from tomasulo_sim.__main__ import EXIT_ABORT, EXIT_OK, EXIT_PARSE, main


class CliTestCase(unittest.TestCase):
    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def write_program(self, text):
        handle = tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False)
        with handle:
            handle.write(text)
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def test_samples(self):
        code, out = self.run_cli("--quiet")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("=== sample 1 ===", out)
        self.assertIn("=== sample 2 ===", out)
        self.assertNotIn("Cycle:", out)

    def test_single_sample_with_trace(self):
        code, out = self.run_cli("--sample", "1")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Cycle: 36 > Finished", out)
        self.assertNotIn("sample 2", out)

    def test_program_file(self):
        path = self.write_program("ADDD F0 F2 F4\n")
        code, out = self.run_cli(path, "-q")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("ADDD F0 F2 F4", out)

    def test_missing_program_file(self):
        workdir = tempfile.TemporaryDirectory()
        self.addCleanup(workdir.cleanup)
        path = os.path.join(workdir.name, "missing.txt")
        with self.assertLogs("tomasulo_sim", level="ERROR") as logs:
            code, out = self.run_cli(path, "-q")
        self.assertEqual(code, EXIT_PARSE)
        self.assertIn("Cannot read program", logs.output[0])
        self.assertNotIn("===", out)

    def test_directory_as_program(self):
        code, _ = self.run_cli(tempfile.gettempdir(), "-q")
        self.assertEqual(code, EXIT_PARSE)

    def test_binary_program_file(self):
        handle = tempfile.NamedTemporaryFile("wb", suffix=".bin", delete=False)
        with handle:
            handle.write(b"\xff\xfe\x00ADDD")
        self.addCleanup(os.unlink, handle.name)
        code, _ = self.run_cli(handle.name, "-q")
        self.assertEqual(code, EXIT_PARSE)

    def test_parse_error(self):
        path = self.write_program("ADDD F0 F2 F4\nBOGUS F0 F2 F4\n")
        code, out = self.run_cli(path)
        self.assertEqual(code, EXIT_PARSE)
        self.assertNotIn("Cycle:", out)

    def test_divergence(self):
        code, out = self.run_cli("--sample", "1", "--max-cycles", "3", "-q")
        self.assertEqual(code, EXIT_ABORT)
        self.assertIn("Cycle: 3", out)

    def test_invariant_violation(self):
        path = self.write_program("ADDD F0 R1 F2\n")
        code, _ = self.run_cli(path, "-q")
        self.assertEqual(code, EXIT_ABORT)

    def test_latency_override(self):
        path = self.write_program("MULTD F0 F2 F4\n")
        code, out = self.run_cli(path, "-q", "--latency", "MULTD=3")
        self.assertEqual(code, EXIT_OK)
        self.assertRegex(out, r"MULTD F0 F2 F4\s+1\s+1\s+3\s+4")

    def test_bad_latency_value(self):
        code, _ = self.run_cli("-q", "--latency", "ADDD=0")
        self.assertEqual(code, EXIT_PARSE)


if __name__ == '__main__':
    unittest.main()

from pathlib import Path
import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from bfir.cli import main as cli_main


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmpdir.name)

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def _write_source(self, text: str, name: str = "program.bf") -> Path:
        path = self.tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    def _run(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli_main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_prints_tree(self) -> None:
        source = self._write_source(".[,+]- comment")
        code, out, err = self._run(str(source))
        self.assertEqual(code, 0, err)
        self.assertEqual(out, "Write\nLoop\n  Read\n  Increment(1)\nIncrement(-1)\n")
        self.assertEqual(err, "")

    def test_prints_json(self) -> None:
        source = self._write_source("[>]")
        code, out, _ = self._run(str(source), "--format", "json")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(
            payload,
            {"instructions": [{"op": "loop", "body": [{"op": "pointer_increment", "amount": 1}]}]},
        )

    def test_comment_only_source_prints_nothing(self) -> None:
        source = self._write_source("just words")
        code, out, _ = self._run(str(source))
        self.assertEqual(code, 0)
        self.assertEqual(out, "")

    def test_writes_output_file(self) -> None:
        source = self._write_source("+-")
        destination = self.tmp_path / "out.txt"
        code, out, _ = self._run(str(source), "-o", str(destination))
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertEqual(destination.read_text(encoding="utf-8"), "Increment(1)\nIncrement(-1)\n")

    def test_iterative_flag_handles_deep_nesting(self) -> None:
        depth = 2000
        source = self._write_source("[" * depth + "]" * depth)
        code, out, err = self._run(str(source), "--iterative")
        self.assertEqual(code, 0, err)
        lines = out.splitlines()
        self.assertEqual(len(lines), depth)
        self.assertEqual(lines[-1], "  " * (depth - 1) + "Loop")

    def test_recursive_parse_reports_excessive_nesting(self) -> None:
        depth = 2000
        source = self._write_source("[" * depth + "]" * depth)
        code, out, err = self._run(str(source))
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("--iterative", err)

    def test_unbalanced_loop_reports_error(self) -> None:
        source = self._write_source("+[+")
        code, out, err = self._run(str(source))
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Unmatched '[' at position 1", err)

    def test_missing_file(self) -> None:
        code, _, err = self._run(str(self.tmp_path / "missing.bf"))
        self.assertEqual(code, 1)
        self.assertIn("Source file not found", err)


if __name__ == "__main__":
    unittest.main()

"""Tests for the optfile command line."""

import logging
import sys

import pytest

from optfile import engine, store
from optfile.cli import main


@pytest.fixture
def opts(tmp_path):
    path = tmp_path / "opts"
    path.write_text("a=1\n#a=99\nb=2\n")
    return path


# --- modes ---

class TestModes:
    def test_read(self, opts, capsys):
        assert main(["-f", str(opts), "-r", "a", "b", "c"]) == 0
        out, _ = capsys.readouterr()
        assert out == "1\n2\n\n"
        assert opts.read_text() == "a=1\n#a=99\nb=2\n"

    def test_write(self, opts, capsys):
        assert main(["-f", str(opts), "-w", "a=10", "c=3"]) == 0
        assert opts.read_text() == "a=10\n#a=99\nb=2\nc=3\n"
        out, _ = capsys.readouterr()
        assert out == ""

    def test_delete(self, opts):
        assert main(["--file", str(opts), "--delete", "a"]) == 0
        assert opts.read_text() == "#a=99\nb=2\n"

    def test_operands_before_flags(self, opts, capsys):
        assert main(["b", "-r", "-f", str(opts)]) == 0
        out, _ = capsys.readouterr()
        assert out == "2\n"

    def test_repeated_mode_flag(self, opts):
        assert main(["-w", "-f", str(opts), "-w", "b=3"]) == 0
        assert opts.read_text() == "a=1\n#a=99\nb=3\n"

    def test_duplicate_write_keys_first_wins(self, opts):
        assert main(["-f", str(opts), "-w", "a=5", "a=6"]) == 0
        assert opts.read_text() == "a=5\n#a=99\nb=2\n"

    def test_write_through_symlink(self, tmp_path):
        real = tmp_path / "real.conf"
        real.write_text("a=1\n")
        link = tmp_path / "link.conf"
        link.symlink_to(real)
        assert main(["-f", str(link), "-w", "a=2"]) == 0
        assert link.is_symlink()
        assert real.read_text() == "a=2\n"


# --- verbose ---

class TestVerbose:
    def test_read_echoes_keys_to_stderr(self, opts, capsys):
        assert main(["-v", "-f", str(opts), "-r", "a"]) == 0
        out, err = capsys.readouterr()
        assert out == "1\n"
        assert "a=" in err
        assert "[optfile] Mode: READ" in err
        assert "Keys to read/delete: [a]" in err

    def test_write_lists_pairs(self, opts, capsys):
        assert main(["-v", "-f", str(opts), "-w", "a=2"]) == 0
        _, err = capsys.readouterr()
        assert "Keys to set: [a: 2]" in err
        assert "Mode: WRITE" in err

    def test_quiet_by_default(self, opts, capsys):
        assert main(["-f", str(opts), "-r", "a"]) == 0
        _, err = capsys.readouterr()
        assert err == ""

    def test_no_duplicates_with_root_handler(self, opts, capsys):
        root_handler = logging.StreamHandler(sys.stderr)
        logging.getLogger().addHandler(root_handler)
        try:
            assert main(["-v", "-f", str(opts), "-r", "a"]) == 0
        finally:
            logging.getLogger().removeHandler(root_handler)
        _, err = capsys.readouterr()
        assert err.count("Mode: READ") == 1


# --- usage errors ---

class TestUsage:
    def test_no_arguments_prints_help(self, capsys):
        assert main([]) == 0
        _, err = capsys.readouterr()
        assert "usage: optfile" in err

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-h"])
        assert exc.value.code == 0

    @pytest.mark.parametrize(
        "argv",
        [
            ["-r", "-w", "a"],
            ["-r", "a"],
            ["-r"],
            ["a"],
            ["-r", "a=1"],
            ["-d", "a=1"],
            ["-w", "a"],
            ["-w", "a="],
            ["-w", "=1"],
            ["-w", "#a=1"],
            ["-r", "#a"],
        ],
    )
    def test_exit_code_2(self, opts, argv, capsys):
        if argv != ["-r", "a"]:
            argv = ["-f", str(opts)] + argv
        with pytest.raises(SystemExit) as exc:
            main(argv)
        assert exc.value.code == 2
        _, err = capsys.readouterr()
        assert "usage: optfile" in err
        assert opts.read_text() == "a=1\n#a=99\nb=2\n"


# --- I/O failures ---

class TestIOErrors:
    def test_missing_file_read(self, tmp_path, capsys):
        assert main(["-f", str(tmp_path / "missing"), "-r", "a"]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "Failed to open file" in err

    def test_missing_file_write_creates_nothing(self, tmp_path):
        path = tmp_path / "missing"
        assert main(["-f", str(path), "-w", "a=1"]) == 1
        assert not path.exists()

    def test_directory_target(self, tmp_path):
        assert main(["-f", str(tmp_path), "-d", "a"]) == 1

    def test_unwritable_target_fails_before_rewrite(self, opts, monkeypatch):
        def refuse(path):
            raise PermissionError(13, "Permission denied", str(path))

        def unexpected(*args, **kwargs):
            raise AssertionError("engine.apply must not run")

        monkeypatch.setattr(store, "ensure_writable", refuse)
        monkeypatch.setattr(engine, "apply", unexpected)
        assert main(["-f", str(opts), "-w", "a=2"]) == 1
        assert opts.read_text() == "a=1\n#a=99\nb=2\n"

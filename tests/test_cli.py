"""
Tests for the parmatch command line.
"""

import json

import pytest

from parmatch.cli import EXIT_ERROR, EXIT_FINDINGS, EXIT_OK, main


LIB = "module fifo #(parameter WIDTH = 8, parameter DEPTH = 16) ();\nendmodule\n"


@pytest.fixture
def project(write_sources, tmp_path):
    write_sources({
        "rtl/fifo.v": LIB,
        "rtl/top.v": "module top;\n  fifo #(.WIDTH(4), .SIZE(2)) u0 ();\nendmodule\n",
        "rtl/tb/top_tb.sv": "module tb;\n  fifo u1 ();\nendmodule\n",
    })
    return tmp_path / "rtl"


class TestTextOutput:
    """Default output channels and exit codes."""

    def test_findings_and_warnings(self, project, capsys):
        """Findings go to stdout, warnings to stderr."""
        code = main([str(project)])
        out, err = capsys.readouterr()
        top = project / "top.v"
        tb = project / "tb" / "top_tb.sv"
        lib = project / "fifo.v"
        assert code == EXIT_FINDINGS
        assert out.splitlines() == [
            f"{tb}:2: parameter 'WIDTH' not assigned in instantiation of module 'fifo' "
            f"(defined at {lib}:1)",
            f"{tb}:2: parameter 'DEPTH' not assigned in instantiation of module 'fifo' "
            f"(defined at {lib}:1)",
            f"{top}:2: parameter 'DEPTH' not assigned in instantiation of module 'fifo' "
            f"(defined at {lib}:1)",
        ]
        assert err.splitlines() == [
            f"warning: {top}:2: named parameter 'SIZE' missing in module 'fifo' "
            f"(defined at {lib}:1)",
        ]

    def test_clean_tree(self, write_sources, tmp_path, capsys):
        """No findings exits 0 with empty stdout."""
        write_sources({"lib.v": LIB, "top.v": "fifo #(1, 2) u0 ();\n"})
        assert main([str(tmp_path)]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_verbose_silences_warnings(self, project, capsys):
        """--verbose drops the unknown-parameter warning."""
        main(["--verbose", str(project)])
        assert capsys.readouterr().err == ""

    def test_exclude(self, project, capsys):
        """--exclude skips matching paths."""
        main(["--exclude", "tb", str(project)])
        out = capsys.readouterr().out
        assert "top_tb.sv" not in out
        assert len(out.splitlines()) == 1

    def test_exclude_regex(self, project, capsys):
        """--exclude-regex skips matching paths."""
        main(["--exclude-regex", r"_tb\.sv$", str(project)])
        assert "top_tb.sv" not in capsys.readouterr().out

    def test_ext(self, project, capsys):
        """--ext replaces the extension list."""
        main(["--ext", ".v", str(project)])
        assert "top_tb.sv" not in capsys.readouterr().out

    def test_summary(self, project, capsys):
        """--summary prints counts to stderr."""
        main(["--summary", str(project)])
        assert capsys.readouterr().err.splitlines()[-1] == "3 unassigned parameter(s), 1 warning(s)"

    def test_aggressive(self, write_sources, tmp_path, capsys):
        """--aggressive checks module names in any context."""
        write_sources({"lib.v": LIB, "top.v": "assign w = fifo;\n"})
        assert main([str(tmp_path)]) == EXIT_OK
        assert main(["--aggressive", str(tmp_path)]) == EXIT_FINDINGS


class TestJsonOutput:
    """--format json."""

    def test_json_document(self, project, capsys):
        """Both channels in one JSON document on stdout."""
        code = main(["--format", "json", str(project)])
        out, err = capsys.readouterr()
        data = json.loads(out)
        assert code == EXIT_FINDINGS
        assert err == ""
        assert [f["parameter"] for f in data["findings"]] == ["WIDTH", "DEPTH", "DEPTH"]
        assert data["findings"][0]["module"] == "fifo"
        assert data["diagnostics"][0]["message"].startswith("named parameter 'SIZE'")


class TestErrors:
    """Fatal conditions and usage errors."""

    def test_missing_root(self, tmp_path, capsys):
        """A missing root is a fatal error."""
        assert main([str(tmp_path / "nowhere")]) == EXIT_ERROR
        assert capsys.readouterr().err.startswith("error: unable to read")

    def test_bad_config(self, tmp_path, capsys):
        """A broken config file is a fatal error."""
        config = tmp_path / "bad.yaml"
        config.write_text("verbose: maybe\n", encoding="utf-8")
        assert main(["--config", str(config), str(tmp_path)]) == EXIT_ERROR
        assert capsys.readouterr().err.startswith("error:")

    def test_no_roots(self, capsys):
        """At least one root is required."""
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_config_file_options(self, project, tmp_path, capsys):
        """Settings come from --config when given."""
        config = tmp_path / "parmatch.yaml"
        config.write_text("exclude_globs: [tb]\nverbose: true\n", encoding="utf-8")
        main(["--config", str(config), str(project)])
        out, err = capsys.readouterr()
        assert "top_tb.sv" not in out
        assert err == ""

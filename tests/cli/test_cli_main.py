"""
Tests for the command-line interface.
"""

import io
import json

import pytest

from rendering import load_generated
from sample_models import Greeting
from stache.cli.main import load_model, main


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "hello.mustache"
    path.write_text("Hello, {{name}}!\n", encoding="utf-8")
    return path


class TestLoadModel:
    """Tests for resolving --model references."""

    def test_valid_reference(self):
        """Verify module:Class imports the class."""
        assert load_model("sample_models:Greeting") is Greeting

    def test_malformed_reference(self):
        """Verify a missing class part is rejected."""
        with pytest.raises(ValueError, match="must look like"):
            load_model("sample_models")

    def test_missing_attribute(self):
        """Verify an unknown class name is rejected."""
        with pytest.raises(ValueError, match="has no attribute"):
            load_model("sample_models:Nope")

    def test_not_a_class(self):
        """Verify functions are not accepted as models."""
        with pytest.raises(ValueError, match="is not a class"):
            load_model("stache.runtime:escape_html")


class TestCompileCommand:
    """Tests for `stache compile`."""

    def test_module_to_stdout(self, template, capsys):
        """Verify the generated module is printed."""
        code = main(["compile", str(template), "-m", "sample_models:Greeting", "--log-level", "silent"])

        out = capsys.readouterr().out
        assert code == 0
        assert "def render(data: Greeting, writer: Writer) -> None:" in out

    def test_json_to_file(self, template, tmp_path):
        """Verify --format json writes the compile result."""
        output = tmp_path / "out.json"
        code = main([
            "compile", str(template),
            "-m", "sample_models:Greeting",
            "--format", "json",
            "-o", str(output),
            "--log-level", "silent",
        ])

        assert code == 0
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["fragments"][0]["variant"] == "full"

    def test_prefix(self, template, capsys):
        """Verify --prefix renames the render function."""
        main([
            "compile", str(template),
            "-m", "sample_models:Greeting",
            "--prefix", "hello",
            "--log-level", "silent",
        ])

        assert "def render_hello(" in capsys.readouterr().out

    def test_bad_model_exit_code(self, template, capsys):
        """Verify an unloadable model exits with 2."""
        code = main(["compile", str(template), "-m", "no_such_module_xyz:Thing", "--log-level", "silent"])

        assert code == 2
        assert "error:" in capsys.readouterr().err

    def test_compile_error_exit_code(self, tmp_path, capsys):
        """Verify template errors are printed with their position."""
        path = tmp_path / "bad.mustache"
        path.write_text("{{#name}}", encoding="utf-8")

        code = main(["compile", str(path), "-m", "sample_models:Greeting", "--log-level", "silent"])

        err = capsys.readouterr().err
        assert code == 1
        assert "Unclosed name block at end of file" in err
        assert f"{path}:1:10" in err


class TestTokensCommand:
    """Tests for `stache tokens`."""

    def test_dumps_tokens(self, template, capsys):
        """Verify one line per token, ending with end of file."""
        code = main(["tokens", str(template)])

        lines = capsys.readouterr().out.splitlines()
        assert code == 0
        assert lines[0].endswith("'Hello, '")
        assert lines[-1].endswith("end_of_file")

    def test_no_command_prints_help(self, capsys):
        """Verify running without a command shows usage."""
        assert main([]) == 0
        assert "usage:" in capsys.readouterr().out


class TestAssembleCommand:
    """Tests for `stache assemble`."""

    def test_assembles_saved_results(self, template, tmp_path):
        """Verify separately compiled templates end up in one module."""
        layout = tmp_path / "layout.mustache"
        layout.write_text("<main>{{{yield}}}</main>", encoding="utf-8")
        saved = []
        for path, extra in ((template, []), (layout, ["--layout"])):
            target = tmp_path / f"{path.stem}.json"
            main([
                "compile", str(path),
                "-m", "sample_models:Greeting",
                "--format", "json",
                "-o", str(target),
                "--log-level", "silent",
                *extra,
            ])
            saved.append(str(target))

        module = tmp_path / "views.py"
        code = main(["assemble", *saved, "-o", str(module)])

        assert code == 0
        namespace = load_generated(module.read_text(encoding="utf-8"))
        buffer = io.StringIO()
        data = Greeting(name="Ann")
        namespace["render_layout_header"](data, buffer)
        namespace["render_hello"](data, buffer)
        namespace["render_layout_footer"](data, buffer)
        assert buffer.getvalue() == "<main>Hello, Ann!\n</main>"

    def test_rejects_invalid_result_file(self, tmp_path, capsys):
        """Verify a JSON file that is not a compile result is reported."""
        bogus = tmp_path / "bogus.json"
        bogus.write_text('{"fragments": 3}', encoding="utf-8")

        assert main(["assemble", str(bogus)]) == 1
        assert "is not a compile result" in capsys.readouterr().err

    def test_missing_result_file(self, tmp_path, capsys):
        """Verify an unreadable file exits with 1."""
        assert main(["assemble", str(tmp_path / "absent.json")]) == 1
        assert "error:" in capsys.readouterr().err

"""Tests for the CLI main module."""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from xml_helper import __version__
from xml_helper.cli.main import (
    COMMANDS,
    MAX_TEXT_ERRORS,
    STATUS_FAILED,
    STATUS_OK,
    create_argument_parser,
    format_results,
    load_config,
    main,
)
from xml_helper.shared import ConfigValidationError, HelperConfig

XS = 'xmlns:xs="http://www.w3.org/2001/XMLSchema"'

SCHEMA = f"""<xs:schema {XS}>
  <xs:element name="note" type="NoteType"/>
  <xs:complexType name="NoteType">
    <xs:sequence>
      <xs:element name="to" type="xs:string"/>
      <xs:element name="body" type="xs:string"/>
    </xs:sequence>
    <xs:attribute name="priority" type="xs:int"/>
  </xs:complexType>
</xs:schema>"""


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers installed by main() so later tests see clean logging."""
    logger = logging.getLogger("xml_helper")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    yield
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


@pytest.fixture
def write_file(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


class TestArgumentParser:
    """Test argument parsing."""

    def test_parse_command(self) -> None:
        """Test parse command with defaults."""
        args = create_argument_parser().parse_args(["parse", "a.xml", "b.xml"])

        assert args.command == "parse"
        assert [str(p) for p in args.paths] == ["a.xml", "b.xml"]
        assert args.format == "text"

    def test_validate_command(self) -> None:
        """Test validate command options."""
        args = create_argument_parser().parse_args(
            ["validate", "a.xml", "--schema", "s.xsd", "--format", "json"]
        )
        assert str(args.schema) == "s.xsd"
        assert args.format == "json"

    def test_validate_requires_schema(self) -> None:
        """Test that --schema is mandatory."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["validate", "a.xml"])

    def test_conversion_commands(self) -> None:
        """Test to-json and from-json options."""
        parser = create_argument_parser()
        to_json = parser.parse_args(["to-json", "a.xml", "--ignore-namespaces", "--no-coerce"])
        from_json = parser.parse_args(["from-json", "a.json", "--root", "doc", "--indent", "4"])

        assert to_json.ignore_namespaces and to_json.no_coerce
        assert from_json.root == "doc"
        assert from_json.indent == 4

    def test_version(self, capsys) -> None:
        """Test --version output."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestFormatResults:
    """Test result formatting."""

    def test_text_summary(self) -> None:
        """Test the text summary line and status markers."""
        results = [
            {"file": "a.xml", "success": True, "root": "a", "element_count": 3, "errors": []},
            {"file": "b.xml", "success": False, "errors": [
                {"line": 2, "column": 5, "code": "PARSE_ERROR", "message": "Unexpected end tag"},
            ]},
        ]
        output = format_results(results, "text", "Parsed")

        assert output.startswith("Parsed 2 files, 1 successful")
        assert f"{STATUS_OK} a.xml (root: a, elements: 3)" in output
        assert f"{STATUS_FAILED} b.xml" in output
        assert "2:5 [PARSE_ERROR] Unexpected end tag" in output

    def test_text_truncates_errors(self) -> None:
        """Test that long error lists are truncated."""
        errors = [
            {"line": 1, "column": 1, "code": "X", "message": f"error {i}"}
            for i in range(MAX_TEXT_ERRORS + 2)
        ]
        output = format_results([{"file": "a.xml", "success": False, "errors": errors}], "text", "Validated")

        assert "... and 2 more errors" in output
        assert f"error {MAX_TEXT_ERRORS}" not in output

    def test_json(self) -> None:
        """Test JSON formatting."""
        results = [{"file": "a.xml", "success": True, "errors": []}]
        assert json.loads(format_results(results, "json", "Parsed")) == results


class TestLoadConfig:
    """Test configuration file loading."""

    def test_default(self) -> None:
        """Test that no path gives defaults."""
        assert load_config(None) == HelperConfig()

    def test_from_file(self, write_file) -> None:
        """Test loading a configuration file."""
        path = write_file("config.json", json.dumps({"dict_to_xml": {"root_element": "doc"}}))
        assert load_config(path).dict_to_xml.root_element == "doc"

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing file raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path / "missing.json")

    def test_undecodable_file(self, tmp_path) -> None:
        """Test that a config file that is not UTF-8 raises ConfigValidationError."""
        path = tmp_path / "config.json"
        path.write_bytes(b"\xff\xfe{}")

        with pytest.raises(ConfigValidationError):
            load_config(path)


class TestMain:
    """Test the main entry point."""

    def test_no_command(self, capsys) -> None:
        """Test that running without a command prints help."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_invalid_config(self, write_file, capsys) -> None:
        """Test that an invalid configuration file fails early."""
        config = write_file("bad.json", '{"global_": {"logging_level": "LOUD"}}')
        xml = write_file("a.xml", "<a/>")

        assert main(["--config", str(config), "parse", str(xml)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_keyboard_interrupt(self, write_file, capsys) -> None:
        """Test that interruption exits with 130."""
        xml = write_file("a.xml", "<a/>")
        with patch.dict(COMMANDS, {"parse": Mock(side_effect=KeyboardInterrupt)}):
            assert main(["parse", str(xml)]) == 130
        assert "interrupted" in capsys.readouterr().err

    def test_verbose_enables_debug_logging(self, write_file) -> None:
        """Test that -v configures debug logging."""
        xml = write_file("a.xml", "<a/>")
        main(["-v", "parse", str(xml)])
        assert logging.getLogger("xml_helper").level == logging.DEBUG


class TestParseCommand:
    """Test the parse command."""

    def test_well_formed(self, write_file, capsys) -> None:
        """Test parsing a well-formed file."""
        xml = write_file("ok.xml", "<root><a>1</a></root>")

        assert main(["-q", "parse", str(xml)]) == 0
        out = capsys.readouterr().out
        assert "Parsed 1 files, 1 successful" in out
        assert "(root: root, elements: 2)" in out

    def test_malformed(self, write_file, capsys) -> None:
        """Test parsing a malformed file."""
        xml = write_file("bad.xml", "<unclosed><tag>content</unclosed>")

        assert main(["-q", "parse", str(xml)]) == 1
        assert "[PARSE_ERROR]" in capsys.readouterr().out

    def test_json_output(self, write_file, capsys) -> None:
        """Test JSON output for several files."""
        good = write_file("good.xml", "<root/>")
        bad = write_file("bad.xml", "<root>")

        assert main(["-q", "parse", str(good), str(bad), "--format", "json"]) == 1
        results = json.loads(capsys.readouterr().out)

        assert [r["success"] for r in results] == [True, False]
        assert results[0]["root"] == "root"
        assert results[1]["errors"][0]["code"] == "PARSE_ERROR"

    def test_missing_file(self, tmp_path, capsys) -> None:
        """Test that unreadable files are reported and fail the run."""
        assert main(["-q", "parse", str(tmp_path / "missing.xml")]) == 1
        assert "Could not read" in capsys.readouterr().err

    def test_undecodable_file(self, write_file, tmp_path, capsys) -> None:
        """Test that a file that is not UTF-8 fails alone without stopping the run."""
        bad = tmp_path / "latin.xml"
        bad.write_bytes(b"<a>\xff\xfe</a>")
        good = write_file("good.xml", "<a/>")

        assert main(["-q", "parse", str(bad), str(good), "--format", "json"]) == 1
        captured = capsys.readouterr()
        results = json.loads(captured.out)

        assert [r["success"] for r in results] == [False, True]
        assert "Could not read" in captured.err


class TestValidateCommand:
    """Test the validate command."""

    def test_valid(self, write_file, capsys) -> None:
        """Test validating a valid document."""
        schema = write_file("note.xsd", SCHEMA)
        xml = write_file("note.xml", '<note priority="1"><to>Ann</to><body>Hi</body></note>')

        assert main(["-q", "validate", str(xml), "-s", str(schema)]) == 0
        assert "Validated 1 files, 1 successful" in capsys.readouterr().out

    def test_invalid(self, write_file, capsys) -> None:
        """Test validating an invalid document."""
        schema = write_file("note.xsd", SCHEMA)
        xml = write_file("note.xml", '<note priority="high"><to>Ann</to></note>')

        assert main(["-q", "validate", str(xml), "-s", str(schema), "-f", "json"]) == 1
        results = json.loads(capsys.readouterr().out)
        assert sorted(e["code"] for e in results[0]["errors"]) == [
            "INVALID_ATTRIBUTE_VALUE",
            "MIN_OCCURS_VIOLATION",
        ]

    def test_invalid_schema(self, write_file, capsys) -> None:
        """Test that a broken schema stops the command."""
        schema = write_file("bad.xsd", "<xs:schema")
        xml = write_file("note.xml", "<note/>")

        assert main(["-q", "validate", str(xml), "-s", str(schema)]) == 1
        assert "Invalid schema" in capsys.readouterr().err

    def test_missing_schema(self, write_file, tmp_path, capsys) -> None:
        """Test that an unreadable schema stops the command."""
        xml = write_file("note.xml", "<note/>")

        assert main(["-q", "validate", str(xml), "-s", str(tmp_path / "none.xsd")]) == 1
        assert "Could not read schema" in capsys.readouterr().err

    def test_undecodable_schema(self, write_file, tmp_path, capsys) -> None:
        """Test that a schema file that is not UTF-8 stops the command."""
        schema = tmp_path / "latin.xsd"
        schema.write_bytes(b"<xs:schema>\xff</xs:schema>")
        xml = write_file("note.xml", "<note/>")

        assert main(["-q", "validate", str(xml), "-s", str(schema)]) == 1
        assert "Could not read schema" in capsys.readouterr().err


class TestConversionCommands:
    """Test to-json and from-json."""

    def test_to_json(self, write_file, capsys) -> None:
        """Test converting XML to JSON."""
        xml = write_file("p.xml", '<person id="1"><name>Ann</name></person>')

        assert main(["-q", "to-json", str(xml)]) == 0
        assert json.loads(capsys.readouterr().out) == {"@id": 1, "name": "Ann"}

    def test_to_json_options(self, write_file, capsys) -> None:
        """Test prefix, namespace and coercion flags."""
        xml = write_file("p.xml", '<x:p xmlns:x="urn:x" x:id="1"><x:n>2</x:n></x:p>')

        code = main([
            "-q", "to-json", str(xml),
            "--attribute-prefix", "_", "--ignore-namespaces", "--no-coerce",
        ])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"_id": "1", "n": "2"}

    def test_to_json_malformed(self, write_file, capsys) -> None:
        """Test that parse errors are reported on stderr."""
        xml = write_file("bad.xml", "<a>")

        assert main(["-q", "to-json", str(xml)]) == 1
        assert "PARSE_ERROR" in capsys.readouterr().err

    def test_to_json_undecodable_file(self, tmp_path, capsys) -> None:
        """Test that a file that is not UTF-8 is reported on stderr."""
        xml = tmp_path / "latin.xml"
        xml.write_bytes(b"<a>\xff</a>")

        assert main(["-q", "to-json", str(xml)]) == 1
        assert "Could not read" in capsys.readouterr().err

    def test_from_json_undecodable_file(self, tmp_path, capsys) -> None:
        """Test that undecodable JSON input is reported on stderr."""
        data = tmp_path / "latin.json"
        data.write_bytes(b'{"a": "\xff"}')

        assert main(["-q", "from-json", str(data)]) == 1
        assert "Could not read" in capsys.readouterr().err

    def test_from_json(self, write_file, capsys) -> None:
        """Test converting JSON to XML."""
        data = write_file("p.json", json.dumps({"@id": 1, "name": "Ann"}))

        assert main(["-q", "from-json", str(data), "--root", "person"]) == 0
        assert capsys.readouterr().out == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<person id="1">\n'
            "  <name>Ann</name>\n"
            "</person>\n"
        )

    def test_from_json_compact(self, write_file, capsys) -> None:
        """Test --no-declaration and --indent 0."""
        data = write_file("p.json", json.dumps({"a": [1, 2]}))

        assert main(["-q", "from-json", str(data), "--no-declaration", "--indent", "0"]) == 0
        assert capsys.readouterr().out == "<root><a>1</a><a>2</a></root>"

    def test_from_json_root_from_config(self, write_file, capsys) -> None:
        """Test that the configured root element is used."""
        config = write_file("c.json", json.dumps({"dict_to_xml": {"root_element": "doc", "declaration": False}}))
        data = write_file("p.json", json.dumps({"a": 1}))

        assert main(["-q", "-c", str(config), "from-json", str(data)]) == 0
        assert capsys.readouterr().out.startswith("<doc>")

    def test_from_json_invalid_json(self, write_file, capsys) -> None:
        """Test malformed JSON input."""
        data = write_file("bad.json", "{nope")

        assert main(["-q", "from-json", str(data)]) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_from_json_invalid_name(self, write_file, capsys) -> None:
        """Test keys that cannot be element names."""
        data = write_file("bad.json", json.dumps({"not valid": 1}))

        assert main(["-q", "from-json", str(data)]) == 1
        assert "Conversion failed" in capsys.readouterr().err

    def test_from_json_negative_indent(self, write_file, capsys) -> None:
        """Test that negative indentation is rejected."""
        data = write_file("p.json", "{}")

        assert main(["-q", "from-json", str(data), "--indent", "-1"]) == 1
        assert "--indent" in capsys.readouterr().err

"""Main CLI entry point for the xml-helper command-line tool.

Provides parsing, schema validation and JSON conversion of XML files.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from xml_helper import __version__
from xml_helper.api import XmlHelper
from xml_helper.shared import (
    ConfigValidationError,
    ConversionError,
    HelperConfig,
    ValidationError,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__, None, "cli")

STATUS_OK = "✓"
STATUS_FAILED = "✗"

# Errors listed per file in text output
MAX_TEXT_ERRORS = 10


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-helper",
        description="Parse XML, validate it against XSD schemas and convert it to and from JSON",
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Check that XML files are well-formed")
    parse_parser.add_argument("paths", nargs="+", type=Path, help="XML files to parse")
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate XML files against a schema")
    validate_parser.add_argument("paths", nargs="+", type=Path, help="XML files to validate")
    validate_parser.add_argument(
        "--schema", "-s",
        type=Path,
        required=True,
        help="XSD schema file",
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )

    # to-json command
    to_json_parser = subparsers.add_parser("to-json", help="Convert an XML file to JSON")
    to_json_parser.add_argument("path", type=Path, help="XML file to convert")
    to_json_parser.add_argument("--attribute-prefix", help="Prefix for attribute keys")
    to_json_parser.add_argument("--text-key", help="Key for element text")
    to_json_parser.add_argument(
        "--ignore-namespaces",
        action="store_true",
        help="Drop namespace prefixes from names",
    )
    to_json_parser.add_argument(
        "--no-coerce",
        action="store_true",
        help="Keep all values as strings",
    )

    # from-json command
    from_json_parser = subparsers.add_parser("from-json", help="Convert a JSON file to XML")
    from_json_parser.add_argument("path", type=Path, help="JSON file to convert")
    from_json_parser.add_argument("--root", help="Root element name")
    from_json_parser.add_argument(
        "--no-declaration",
        action="store_true",
        help="Omit the XML declaration",
    )
    from_json_parser.add_argument(
        "--indent",
        type=int,
        help="Spaces per indentation level (0 for compact output)",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file",
    )

    return parser


def load_config(path: Optional[Path]) -> HelperConfig:
    """Load configuration from a JSON file, defaults when no path is given.

    Raises:
        ConfigValidationError: If the file is unreadable or invalid
    """
    if path is None:
        return HelperConfig()
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigValidationError(f"Could not read config file {path}: {e}") from e
    return HelperConfig.from_json(content)


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _file_result(path: Path, errors: List[ValidationError], **fields: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {"file": str(path), "success": not errors}
    result.update(fields)
    result["errors"] = [error.to_dict() for error in errors]
    return result


def format_results(results: List[Dict[str, Any]], format_type: str, verb: str) -> str:
    """Format per-file results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2, ensure_ascii=False)

    lines = []
    successful = sum(1 for r in results if r["success"])
    lines.append(f"{verb} {len(results)} files, {successful} successful")
    lines.append("-" * 60)

    for result in results:
        status = STATUS_OK if result["success"] else STATUS_FAILED
        detail = ""
        if result.get("root"):
            detail = f" (root: {result['root']}, elements: {result.get('element_count', 0)})"
        lines.append(f"{status} {result['file']}{detail}")

        errors = result["errors"]
        for error in errors[:MAX_TEXT_ERRORS]:
            lines.append(
                f"   {error['line']}:{error['column']} [{error['code']}] {error['message']}"
            )
        if len(errors) > MAX_TEXT_ERRORS:
            lines.append(f"   ... and {len(errors) - MAX_TEXT_ERRORS} more errors")

    return "\n".join(lines)


def cmd_parse(args: argparse.Namespace, config: HelperConfig) -> int:
    """Handle parse command."""
    helper = XmlHelper(config)
    results = []

    for path in args.paths:
        try:
            text = _read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            results.append({"file": str(path), "success": False, "errors": [], "error": str(e)})
            print(f"Could not read {path}: {e}", file=sys.stderr)
            continue

        parsed = helper.parse_xml(text)
        fields: Dict[str, Any] = {}
        if parsed.node is not None:
            fields["root"] = parsed.node.name
            fields["element_count"] = sum(1 for n in parsed.node.iter() if not n.is_text)
        results.append(_file_result(path, parsed.errors, **fields))

    print(format_results(results, args.format, "Parsed"))
    return 0 if all(r["success"] for r in results) else 1


def cmd_validate(args: argparse.Namespace, config: HelperConfig) -> int:
    """Handle validate command."""
    helper = XmlHelper(config)

    try:
        schema_errors = helper.load_schema(_read_text(args.schema))
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read schema {args.schema}: {e}", file=sys.stderr)
        return 1
    if schema_errors:
        print(f"Invalid schema {args.schema}:", file=sys.stderr)
        for error in schema_errors:
            print(f"   {error}", file=sys.stderr)
        return 1

    results = []
    for path in args.paths:
        try:
            text = _read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            results.append({"file": str(path), "success": False, "errors": [], "error": str(e)})
            print(f"Could not read {path}: {e}", file=sys.stderr)
            continue
        results.append(_file_result(path, helper.validate_xml(text)))

    print(format_results(results, args.format, "Validated"))
    return 0 if all(r["success"] for r in results) else 1


def cmd_to_json(args: argparse.Namespace, config: HelperConfig) -> int:
    """Handle to-json command."""
    overrides: Dict[str, Any] = {}
    if args.attribute_prefix is not None:
        overrides["xml_to_dict__attribute_prefix"] = args.attribute_prefix
        overrides["dict_to_xml__attribute_prefix"] = args.attribute_prefix
    if args.text_key is not None:
        overrides["xml_to_dict__text_key"] = args.text_key
        overrides["dict_to_xml__text_key"] = args.text_key
    if args.ignore_namespaces:
        overrides["xml_to_dict__ignore_namespaces"] = True
    if args.no_coerce:
        overrides["xml_to_dict__coerce_values"] = False
    if overrides:
        config = config.override(**overrides)

    try:
        text = _read_text(args.path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read {args.path}: {e}", file=sys.stderr)
        return 1

    result = XmlHelper(config).xml_to_dict(text)
    if not result.success:
        for error in result.errors:
            print(f"{args.path}:{error}", file=sys.stderr)
        return 1

    print(json.dumps(result.data, indent=2, ensure_ascii=False))
    return 0


def cmd_from_json(args: argparse.Namespace, config: HelperConfig) -> int:
    """Handle from-json command."""
    overrides: Dict[str, Any] = {}
    if args.no_declaration:
        overrides["dict_to_xml__declaration"] = False
    if args.indent is not None:
        if args.indent < 0:
            print("--indent must be >= 0", file=sys.stderr)
            return 1
        overrides["dict_to_xml__indent"] = " " * args.indent
    if overrides:
        config = config.override(**overrides)

    try:
        data = json.loads(_read_text(args.path))
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read {args.path}: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Invalid JSON in {args.path}: {e}", file=sys.stderr)
        return 1

    try:
        output = XmlHelper(config).dict_to_xml(data, args.root)
    except ConversionError as e:
        print(f"Conversion failed: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


COMMANDS = {
    "parse": cmd_parse,
    "validate": cmd_validate,
    "to-json": cmd_to_json,
    "from-json": cmd_from_json,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.global_.logging_level)

    logger.debug("Running command", extra={"command": args.command})
    try:
        handler = COMMANDS[args.command]
        return handler(args, config)
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())

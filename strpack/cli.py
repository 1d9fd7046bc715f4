#!/usr/bin/env python3
"""
strpack - compact string map codec CLI

Packs a product's translation catalogs (locale -> string key -> text) into
one compact stream for embedding, and unpacks it again.

Catalog sources:
    catalog.json            whole catalog keyed by locale (JSON or YAML)
    fr=strings/fr.json      one locale's (nested) strings

Commands:
    encode   - Encode catalog files into a stream (or a JS expression)
    decode   - Decode a stream back into a catalog file
    inspect  - Show the op trace of a stream
    validate - Check catalog files before encoding
    stats    - Compare JSON and encoded sizes
    formats  - List supported catalog formats

Example:
    1. strpack validate --input en=strings/en.json --input fr=strings/fr.json
    2. strpack encode --input en=strings/en.json --input fr=strings/fr.json -o strings.strpack
    3. strpack decode --input strings.strpack --format yaml
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .catalog import (
    find_lone_surrogates,
    format_directional,
    sorted_keys,
    sorted_locales,
    validate_catalog,
)
from .config import Config, load_config
from .decoder import CatalogDecoder, tokenize
from .encoder import CatalogEncoder
from .format_handlers import FormatRegistry, load_catalog, parse_source
from .js_export import encode_catalog_to_js
from .stats import SizeEstimator
from .stream_io import read_stream, write_stream

logger = logging.getLogger(__name__)

STREAM_SUFFIX = ".strpack"


def _build_encoder(config: Config) -> CatalogEncoder:
    return CatalogEncoder(
        fallback_locale=config.fallback_locale,
        verify=config.verify,
        normalization=config.normalization,
    )


def _validation_failed(errors) -> dict:
    return {
        "status": "error",
        "error_type": "VALIDATION_FAILED",
        "error": f"{len(errors)} problem(s) found",
        "errors": [e.to_dict() for e in errors],
    }


def _default_output(sources: list[str], suffix: str) -> Path:
    _, first_path = parse_source(sources[0])
    return Path(first_path).with_suffix(suffix)


def cmd_encode(args, config: Config) -> dict:
    """Encode catalog files into a stream."""
    catalog = load_catalog(args.input, args.format if args.format != "auto" else None)
    unwritable = find_lone_surrogates(catalog)
    if unwritable:
        return _validation_failed(unwritable)
    if args.directional:
        catalog = format_directional(catalog, config.rtl_locales)

    encoder = _build_encoder(config)
    if args.js:
        output = encode_catalog_to_js(catalog, encoder)
        output_path = Path(args.output) if args.output else _default_output(args.input, ".js")
    else:
        output = encoder.encode(catalog)
        output_path = Path(args.output) if args.output else _default_output(args.input, STREAM_SUFFIX)

    write_stream(output_path, output)
    logger.info("Wrote %d scalars to %s", len(output), output_path)

    result = {
        "status": "ok",
        "output": str(output_path),
        "stats": {
            "locales": len(sorted_locales(catalog)),
            "keys": len(sorted_keys(catalog)),
            "scalars": len(output),
        },
        "summary": f"Encoded {len(sorted_keys(catalog))} keys in {len(sorted_locales(catalog))} locales.",
    }
    if not args.js:
        result["next_action"] = {
            "command": f"strpack decode --input {output_path}",
            "description": "Decode the stream back into a catalog file",
        }
    return result


def cmd_decode(args, config: Config) -> dict:
    """Decode a stream file into a catalog file."""
    stream = read_stream(args.input)
    catalog = CatalogDecoder(fallback_locale=config.fallback_locale).decode(stream)

    handler = FormatRegistry.get_handler(args.format)
    content = handler.dump(catalog, nested=not args.flat)

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = Path(args.input).with_suffix(f".{handler.file_extensions[0]}")
    output_path.write_text(content, encoding="utf-8")
    logger.info("Wrote %s catalog to %s", handler.name, output_path)

    return {
        "status": "ok",
        "output": str(output_path),
        "format": handler.name,
        "stats": {
            "locales": len(catalog),
            "keys": len(sorted_keys(catalog)),
        },
    }


def cmd_inspect(args, config: Config) -> dict:
    """Show the instructions of a stream."""
    stream = read_stream(args.input)
    instructions = [
        {
            "position": instruction.position,
            "op": instruction.opcode.name,
            "operand": instruction.operand,
        }
        for instruction in tokenize(stream)
    ]
    return {
        "status": "ok",
        "count": len(instructions),
        "instructions": instructions,
    }


def cmd_validate(args, config: Config) -> dict:
    """Validate catalog files."""
    catalog = load_catalog(args.input, args.format if args.format != "auto" else None)
    is_valid, errors = validate_catalog(catalog, config.fallback_locale)

    if is_valid:
        return {
            "status": "ok",
            "summary": f"{len(sorted_keys(catalog))} keys in {len(sorted_locales(catalog))} locales are valid.",
            "next_action": {
                "command": "strpack encode " + " ".join(f"--input {source}" for source in args.input),
                "description": "Encode the catalog",
            },
        }

    return _validation_failed(errors)


def cmd_stats(args, config: Config) -> dict:
    """Compare JSON and encoded sizes of a catalog."""
    catalog = load_catalog(args.input, args.format if args.format != "auto" else None)
    unwritable = find_lone_surrogates(catalog)
    if unwritable:
        return _validation_failed(unwritable)
    stream = _build_encoder(replace(config, verify=False)).encode(catalog)
    report = SizeEstimator(model=config.token_encoding).measure(catalog, stream)

    return {
        "status": "ok",
        "stats": report.to_dict(),
        "summary": f"Encoded size is {report.ratio:.1%} of JSON ({report.encoded_bytes} of {report.json_bytes} bytes).",
    }


def cmd_formats(args, config: Config) -> dict:
    """List supported formats."""
    formats = FormatRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


COMMANDS = {
    "encode": cmd_encode,
    "decode": cmd_decode,
    "inspect": cmd_inspect,
    "validate": cmd_validate,
    "stats": cmd_stats,
    "formats": cmd_formats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strpack",
        description="strpack - compact string map codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Catalog sources:
  catalog.json          whole catalog keyed by locale
  catalog.yml           Rails-style YAML keyed by locale
  fr=strings/fr.json    one locale's strings (nested or flat)

Examples:
  # Encode per-locale string files
  strpack encode --input en=strings/en.json --input fr=strings/fr.json -o strings.strpack

  # Encode as a self-decoding JavaScript expression
  strpack encode --input catalog.json --js -o strings.js

  # Decode back to YAML with nested keys
  strpack decode --input strings.strpack --format yaml

  # Show what the stream does
  strpack inspect --input strings.strpack

Configuration:
  --config FILE or STRPACK_CONFIG (YAML), then STRPACK_FALLBACK_LOCALE,
  STRPACK_VERIFY, STRPACK_NORMALIZATION, STRPACK_RTL_LOCALES,
  STRPACK_TOKEN_ENCODING, STRPACK_LOG_LEVEL
        """,
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--fallback-locale", help="Fallback locale (default: en)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    format_choices = ["auto"] + sorted(f["name"] for f in FormatRegistry.list_formats())

    # encode command
    encode_parser = subparsers.add_parser("encode", help="Encode catalog files into a stream")
    encode_parser.add_argument("--input", "-i", required=True, action="append", help="Catalog file or locale=file (repeatable)")
    encode_parser.add_argument("--output", "-o", help="Output file (default: next to the first input)")
    encode_parser.add_argument("--format", "-f", default="auto", choices=format_choices,
                               help="Input format (default: auto-detect)")
    encode_parser.add_argument("--js", action="store_true", help="Write a self-decoding JavaScript expression")
    encode_parser.add_argument("--directional", "-d", action="store_true",
                               help="Trim values and wrap them with LTR/RTL embedding marks")
    encode_parser.add_argument("--no-verify", action="store_true", help="Skip decoding the output to check it")

    # decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a stream into a catalog file")
    decode_parser.add_argument("--input", "-i", required=True, help="Stream file")
    decode_parser.add_argument("--output", "-o", help="Output file (default: input with the format's extension)")
    decode_parser.add_argument("--format", "-f", default="json", choices=format_choices[1:],
                               help="Output format (default: json)")
    decode_parser.add_argument("--flat", action="store_true", help="Keep dotted keys instead of nesting")

    # inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Show the op trace of a stream")
    inspect_parser.add_argument("--input", "-i", required=True, help="Stream file")

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Check catalog files")
    validate_parser.add_argument("--input", "-i", required=True, action="append", help="Catalog file or locale=file (repeatable)")
    validate_parser.add_argument("--format", "-f", default="auto", choices=format_choices,
                                 help="Input format (default: auto-detect)")

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Compare JSON and encoded sizes")
    stats_parser.add_argument("--input", "-i", required=True, action="append", help="Catalog file or locale=file (repeatable)")
    stats_parser.add_argument("--format", "-f", default="auto", choices=format_choices,
                              help="Input format (default: auto-detect)")

    # formats command
    subparsers.add_parser("formats", help="List supported catalog formats")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config)
        if args.fallback_locale:
            config = replace(config, fallback_locale=args.fallback_locale)
        if getattr(args, "no_verify", False):
            config = replace(config, verify=False)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

        result = COMMANDS[args.command](args, config)
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    if result.get("status") != "ok":
        sys.exit(1)


if __name__ == "__main__":
    main()

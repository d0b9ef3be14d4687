#!/usr/bin/env python3
"""
CLI script to run an extraction specification over HTML files.

Compiles SPEC once, then extracts STRUCT from every FILE and prints (or
saves with -o) a JSON list with one record per file:

  {"file": "page.html", "status": "success", "data": {...}}
  {"file": "bad.html", "status": "error", "error": "extracting the data of field ..."}

Exit status: 0 when every file succeeded, 1 when any extraction failed,
2 when the specification itself does not compile.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from html_extractor.config import ExtractorSettings
from html_extractor.exceptions import InvalidInput, SpecError
from html_extractor.logger import setup_logger
from html_extractor.main import load_spec_file


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Extract structured data from HTML files")
    parser.add_argument("spec", help="Specification file")
    parser.add_argument("struct", help="Struct to extract from each file")
    parser.add_argument("files", nargs="+", help="HTML files to process")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--parser", "-p", help="BeautifulSoup tree builder (html5lib, lxml, html.parser)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    args = parser.parse_args(argv)

    # Environment (and .env) first, command line flags override it
    settings = ExtractorSettings.from_env()
    if args.parser:
        settings = settings.model_copy(update={"html_parser": args.parser})
    setup_logger(level="DEBUG" if args.verbose else settings.log_level)

    try:
        module = load_spec_file(args.spec, settings=settings)
        extractor_cls = module[args.struct]
    except SpecError as e:
        print(f"✗ Invalid specification: {e}", file=sys.stderr)
        return 2
    except KeyError as e:
        print(f"✗ {e.args[0]}", file=sys.stderr)
        return 2

    results = []
    failed = False

    for filepath in args.files:
        path = Path(filepath)
        print(f"Extracting: {path.name}", file=sys.stderr)

        try:
            value = extractor_cls.extract_from_file(path, parser=settings.html_parser)
            results.append({
                "file": path.name,
                "status": "success",
                "data": value.model_dump(mode="json"),
            })
            print("  ✓ done", file=sys.stderr)
        except (InvalidInput, OSError) as e:
            failed = True
            results.append({
                "file": path.name,
                "status": "error",
                "error": str(e),
            })
            print(f"  ✗ Error: {e}", file=sys.stderr)

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

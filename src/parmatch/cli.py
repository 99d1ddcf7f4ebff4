"""
CLI entry point for parmatch.

Usage:
    parmatch [OPT]... ROOT...

Finds unbound parameters in Verilog/SystemVerilog module instantiations.
Each ROOT is a file or a directory searched recursively for HDL sources.
Unassigned parameters are printed to stdout, warnings to stderr.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from parmatch import __version__
from parmatch.config import OUTPUT_FORMATS, ParmatchConfig
from parmatch.errors import ParmatchError
from parmatch.runner import AnalysisResult, run

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parmatch",
        description="Find unbound parameters in Verilog module instantiations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    parmatch rtl/
    parmatch --exclude '*_tb.sv' --exclude sim rtl/ ip/
    parmatch --aggressive --format json rtl/top.sv rtl/blocks/
"""
    )
    parser.add_argument('--version', action='version', version=f'parmatch {__version__}')
    parser.add_argument('roots', nargs='+', metavar='ROOT',
                        help='File or directory to scan')
    parser.add_argument('-v', '--verbose', action='store_true', default=None,
                        help='Do not warn about extra or unknown instantiation parameters')
    parser.add_argument('-a', '--aggressive', action='store_true', default=None,
                        help='Check every use of a module name, not just statement starts')
    parser.add_argument('--exclude', action='append', default=[], metavar='GLOB',
                        help='Skip paths matching GLOB (repeatable)')
    parser.add_argument('--exclude-regex', action='append', default=[], metavar='REGEX',
                        help='Skip paths matching REGEX (repeatable)')
    parser.add_argument('--ext', action='append', metavar='EXT',
                        help='HDL file extension to scan in directories (repeatable)')
    parser.add_argument('--config', type=Path, metavar='PATH',
                        help='YAML configuration file')
    parser.add_argument('--format', choices=OUTPUT_FORMATS, dest='output_format',
                        help='Output format (default: text)')
    parser.add_argument('--summary', action='store_true',
                        help='Print finding and warning counts to stderr')
    parser.add_argument('--debug', action='count', default=0,
                        help='Log progress (twice for token traces)')
    return parser


def configure_logging(debug: int) -> None:
    level = logging.WARNING
    if debug == 1:
        level = logging.INFO
    elif debug > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(levelname)s %(name)s: %(message)s")


def emit(result: AnalysisResult, config: ParmatchConfig, summary: bool) -> None:
    if config.output_format == "json":
        print(result.reporter.to_json())
    else:
        sys.stderr.write(result.reporter.render_diagnostics())
        sys.stdout.write(result.reporter.render_findings())
    if summary:
        print(result.reporter.summary(), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    try:
        config = ParmatchConfig(args.config)
        config.override(
            verbose=args.verbose,
            aggressive=args.aggressive,
            extensions=args.ext,
            exclude_globs=config.exclude_globs + args.exclude,
            exclude_regexes=[p.pattern for p in config.exclude_regexes] + args.exclude_regex,
            output_format=args.output_format,
        )
        result = run(args.roots, config)
    except ParmatchError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    emit(result, config, args.summary)
    return EXIT_FINDINGS if result.findings else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

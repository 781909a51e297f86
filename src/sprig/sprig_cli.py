"""
Sprig CLI Entrypoint.

This module provides the command-line interface for parsing Sprig source code.
It supports printing the AST as JSON, re-rendering it as Sprig source, and an
interactive REPL.

Features:
    - Read source from `.sprig` files or inline strings.
    - Lex, parse, and format code with the selected output target.
    - Output to console or file.
    - Report the first syntax error with its position and exit non-zero.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    sprig hello.sprig
    sprig -s "let x = 1 + 2" -t sprig
    sprig myfile.sprig -o myfile.json --indent 4
    sprig --repl --verbose

Environment:
    SPRIG_LOOKAHEAD: Default token window for function-declaration detection
    (unbounded when unset). `--lookahead` takes precedence.
"""

import argparse
import os
import sys

from sprig.sprig_format import EMITTERS, Formatter
from sprig.sprig_lexer import tokenize
from sprig.sprig_parser import ParseError, Parser

LOOKAHEAD_ENV = "SPRIG_LOOKAHEAD"


def run_sprig(
    source: str,
    is_string: bool = False,
    target: str = "json",
    out: str | None = None,
    pretty: bool = False,
    indent: int | None = 2,
    lookahead: int | None = None,
) -> str:
    """
    Run the Sprig toolchain: lex, parse, format, and print or write the result.

    Args:
        source (str): The Sprig source code or path to a `.sprig` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        target (str): Output target ('json' or 'sprig'). Defaults to 'json'.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        pretty (bool): If True, prints banners around the output.
        indent (int | None): Indentation for the output; None writes compact JSON.
        lookahead (int | None): Token window for function-declaration detection.

    Returns:
        str: The formatted output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.sprig'.
        ParseError: If the source does not parse.
        SyntaxError: If the source does not lex.
    """
    if not is_string and not source.endswith(".sprig"):
        raise ValueError("Only .sprig files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    tokens = tokenize(source)

    # 3. Parsing
    program = Parser(tokens, lookahead=lookahead).parse()

    # 4. Formatting
    output = Formatter(target, indent=indent).format(program)

    # 5. Output result
    if pretty:
        banner = "=" * 20
        print(f"{banner}\nSprig {target}\n{banner}\n{output}\n{banner}\n")
    elif not out:
        print(output)

    # 6. Optional write to file
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        if pretty:
            print(f"(wrote to {out})")

    return output


def lookahead_from_env() -> int | None:
    """Read the default lookahead window from SPRIG_LOOKAHEAD.

    Raises:
        ValueError: If the variable is set to something other than a positive integer.
    """
    raw = os.getenv(LOOKAHEAD_ENV, "").strip()
    if not raw:
        return None
    if not raw.isdigit() or int(raw) < 1:
        raise ValueError(f"{LOOKAHEAD_ENV} must be a positive integer, got {raw!r}")
    return int(raw)


def report_error(err: Exception) -> None:
    """Print a parse, lex or input failure on stderr in the `[error] >>>` format."""
    message = err.describe() if isinstance(err, ParseError) else str(err)
    print(f"[error] >>> {message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the Sprig CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, runs the full toolchain (lex -> parse -> format -> output).

    Exits with status 1 when the source has a syntax error or cannot be read.
    """
    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        # No args passed: open REPL instead
        from sprig.sprig_repl import start_repl

        start_repl(lookahead=lookahead_from_env())
        return
    parser = argparse.ArgumentParser(prog="sprig")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-t",
        "--target",
        choices=sorted(EMITTERS),
        default="json",
        help="Output target (default: json)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Indentation width; 0 writes compact JSON (default: 2)",
    )
    parser.add_argument(
        "--lookahead",
        type=int,
        default=None,
        metavar="N",
        help=f"Limit function detection to N tokens (default: ${LOOKAHEAD_ENV} or unbounded)",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a source",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )

    args = parser.parse_args(args_list)

    if args.lookahead is not None and args.lookahead < 1:
        parser.error("--lookahead must be a positive integer")
    try:
        lookahead = args.lookahead or lookahead_from_env()
    except ValueError as e:
        parser.error(str(e))

    if args.repl or args.source is None:
        from sprig.sprig_repl import start_repl

        start_repl(target=args.target, verbose=args.verbose, lookahead=lookahead)
        return

    indent = args.indent if args.indent > 0 else None
    try:
        run_sprig(
            source=args.source,
            is_string=args.string,
            target=args.target,
            out=args.out,
            pretty=args.pretty,
            indent=indent,
            lookahead=lookahead,
        )
    except (SyntaxError, ValueError, OSError) as e:
        report_error(e)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()

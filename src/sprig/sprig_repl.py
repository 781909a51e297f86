import io
import traceback

from sprig.sprig_format import EMITTERS, Formatter
from sprig.sprig_lexer import tokenize
from sprig.sprig_parser import ParseError, Parser


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def print_error(err: SyntaxError) -> None:
    message = err.describe() if isinstance(err, ParseError) else str(err)
    print(f"[error] >>> {message}")


def handle_meta_command(src: str, state: dict[str, str]) -> bool:
    """Handle `:tokens <src>` and `:target <name>`; return True if `src` was one."""
    if not src.startswith(":"):
        return False
    command, _, rest = src[1:].partition(" ")
    rest = rest.strip()
    if command == "tokens":
        try:
            for tok in tokenize(rest):
                print(f"{tok.line}:{tok.col}\t{tok.type}\t{tok.value!r}")
        except SyntaxError as e:
            print_error(e)
    elif command == "target":
        if rest.lower() not in EMITTERS:
            print(f"[error] >>> Unknown output target: {rest!r}")
        else:
            state["target"] = rest.lower()
            print(f"[ok] >>> Output target: {state['target']}")
    else:
        print(f"[error] >>> Unknown command: :{command}")
    return True


def read_chunk() -> str | None:
    """Read one input chunk, continuing while braces are open; None means leave."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def start_repl(
    target: str = "json", verbose: bool = False, lookahead: int | None = None
) -> None:
    print(f"Sprig REPL [target={target}]. Type 'exit' or 'quit' to leave.")
    state = {"target": target}
    parser = Parser(lookahead=lookahead)

    while True:
        try:
            src = read_chunk()
            if src is None:
                print("Exiting Sprig REPL.")
                return
            if not src or src.startswith("//"):
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            if handle_meta_command(src, state):
                continue

            try:
                tokens = tokenize(src)
                if verbose:
                    print(f"[tokens] >>> {tokens}")
                program = parser.parse(tokens)
                print(Formatter(state["target"]).format(program))
            except SyntaxError as e:
                if verbose:
                    print_traceback()
                else:
                    print_error(e)
        except (EOFError, KeyboardInterrupt):
            print("\nExiting Sprig REPL.")
            return

#!/usr/bin/env python3
"""
Minipy Language - Main Entry Point
Run a source file, inspect its tokens or tree, or start a REPL
"""

import sys
from typing import List, Optional

from . import __version__, execute
from .ast_nodes import dump
from .diagnostics import Diagnostics
from .lexer import tokenize
from .parser import parse

USAGE = f"""Minipy {__version__} - A small indentation-based interpreter

Usage:
  minipy [options] [file.mpy]   Run a source file
  minipy                        Start interactive REPL

Options:
  --tokens              Print the token stream instead of running
  --ast                 Print the syntax tree instead of running
  -d, --diagnostics     Report diagnostics on stderr after running
  -h, --help            Show this help
  -v, --version         Show version
"""


def report_diagnostics(diagnostics: Diagnostics):
    for diagnostic in diagnostics:
        print(diagnostic, file=sys.stderr)


def run_file(filepath: str, mode: str = 'run', show_diagnostics: bool = False) -> int:
    """Execute (or dump) a Minipy source file"""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {filepath}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {filepath}: {e}", file=sys.stderr)
        return 1

    diagnostics = Diagnostics()
    if mode == 'tokens':
        for token in tokenize(source, diagnostics):
            print(token)
    elif mode == 'ast':
        print(dump(parse(source, diagnostics)))
    else:
        try:
            execute(source, sys.stdout, diagnostics=diagnostics)
        finally:
            sys.stdout.flush()

    if show_diagnostics:
        report_diagnostics(diagnostics)
    return 0


def run_repl(show_diagnostics: bool = False) -> int:
    """Interactive REPL; variables persist between entries"""
    print(f"Minipy {__version__} - Type 'exit' or Ctrl+D to quit")

    environment = {}
    buffer = []
    in_block = False

    while True:
        try:
            prompt = "... " if in_block else ">>> "
            line = input(prompt)

            if not in_block and line.strip() == "exit":
                break

            # An empty line closes a block
            if in_block and not line.strip():
                in_block = False
            else:
                buffer.append(line)
                if line.rstrip().endswith(':'):
                    in_block = True
                if in_block:
                    continue

            source = '\n'.join(buffer)
            buffer = []

            if not source.strip():
                continue

            diagnostics = Diagnostics()
            try:
                execute(source, sys.stdout, environment, diagnostics)
            except Exception as e:
                print(f"Error: {e}")
            if show_diagnostics:
                report_diagnostics(diagnostics)

        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nInterrupted")
            buffer = []
            in_block = False

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    mode = 'run'
    show_diagnostics = False
    files = []

    for arg in args:
        if arg in ('--help', '-h'):
            print(USAGE)
            return 0
        elif arg in ('--version', '-v'):
            print(f"Minipy {__version__}")
            return 0
        elif arg == '--tokens':
            mode = 'tokens'
        elif arg == '--ast':
            mode = 'ast'
        elif arg in ('--diagnostics', '-d'):
            show_diagnostics = True
        elif arg.startswith('-'):
            print(f"Unknown option: {arg}", file=sys.stderr)
            return 1
        else:
            files.append(arg)

    if not files:
        if mode != 'run':
            # --tokens and --ast need a file to read
            print(USAGE, file=sys.stderr)
            return 1
        return run_repl(show_diagnostics)
    return run_file(files[0], mode, show_diagnostics)


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Console front-end.

Run with:
    python -m tomasulo_sim                 # both sample programs
    python -m tomasulo_sim program.txt     # a program file, '-' for stdin
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional

from .config import DEFAULT_MAX_CYCLES, SimulatorConfig
from .errors import InvariantViolation, ParseError, SimulationDivergence
from .executer import Executer
from .instruction import parse_program
from .isa import Opcode
from .programs import SAMPLE_PROGRAMS
from .report import render_cycle, render_timing

logger = logging.getLogger("tomasulo_sim")

EXIT_OK = 0
EXIT_PARSE = 1
EXIT_ABORT = 2


def _latency_arg(text: str) -> tuple:
    name, sep, cycles = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected OP=CYCLES, got '{text}'")
    try:
        return Opcode.parse(name.strip()), int(cycles)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tomasulo_sim",
        description="Simulate Tomasulo's algorithm and print per-instruction timing.",
    )
    parser.add_argument(
        "program", nargs="?", help="program file, one 'OPCODE DEST SRC1 SRC2' per line ('-' reads stdin)"
    )
    parser.add_argument(
        "--sample", type=int, choices=sorted(SAMPLE_PROGRAMS), help="run only this built-in sample"
    )
    parser.add_argument(
        "--max-cycles", type=int, default=DEFAULT_MAX_CYCLES, help="abort after this many cycles"
    )
    parser.add_argument(
        "--latency", type=_latency_arg, action="append", default=[], metavar="OP=CYCLES",
        help="override an opcode latency, e.g. MULTD=6 (repeatable)",
    )
    parser.add_argument("--fold", action="store_true", help="evaluate numeric results eagerly")
    parser.add_argument("-q", "--quiet", action="store_true", help="print only the final timing table")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every scheduling decision")
    return parser


def _load_programs(args: argparse.Namespace) -> Dict[str, str]:
    if args.program == "-":
        return {"stdin": sys.stdin.read()}
    if args.program:
        with open(args.program, encoding="utf-8") as handle:
            return {args.program: handle.read()}
    numbers = [args.sample] if args.sample else sorted(SAMPLE_PROGRAMS)
    return {f"sample {n}": SAMPLE_PROGRAMS[n] for n in numbers}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = SimulatorConfig(
            latencies=dict(args.latency),
            max_cycles=args.max_cycles,
            fold_constants=args.fold,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_PARSE

    try:
        sources = _load_programs(args)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Cannot read program: %s", exc)
        return EXIT_PARSE

    try:
        # Parse everything first; nothing runs if any program is malformed.
        programs = {name: parse_program(text) for name, text in sources.items()}
    except ParseError as exc:
        logger.error("%s", exc)
        return EXIT_PARSE

    for name, instructions in programs.items():
        print(f"=== {name} ===")
        reporter = None if args.quiet else (lambda snap: print(render_cycle(snap)))
        executer = Executer(config, reporter=reporter)
        executer.add_instructions(instructions)
        try:
            timings = executer.run()
        except SimulationDivergence as exc:
            logger.error("%s", exc)
            if exc.trace:
                print(render_cycle(exc.trace[-1]))
            return EXIT_ABORT
        except InvariantViolation as exc:
            logger.error("%s", exc)
            return EXIT_ABORT
        print(render_timing(timings))
        print()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point: ``python -m sinumerikcam response.json -o program.mpf``

Each input file holds one oracle reply.  Replies are fed through a session
in order, so in generate mode their operations accumulate into a single
program.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config.settings import AppSettings
from .core.job import AppMode, Session
from .core.oracle import OracleError, parse_oracle_response
from .core.toolpath.builder import CurveBuilderParams, build_program_curve
from .gcode.gcode_writer import fmt


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sinumerikcam",
        description="Generate Siemens ShopMill programs (.mpf) from operation models.",
    )
    p.add_argument("inputs", type=Path, nargs="+",
                   help="Oracle reply files (JSON, optionally in code fences)")
    p.add_argument("-o", "--output", type=Path, default=None,
                   help="Output program file (default: settings program name)")
    p.add_argument("--mode", choices=["generate", "optimize"], default="generate",
                   help="generate accumulates operations, optimize replaces them "
                        "(default: generate)")

    # Simulation curve
    p.add_argument("--preview", type=int, default=0, metavar="N",
                   help="Print N+1 tool poses sampled from the program curve")
    p.add_argument("--safe-z", type=float, default=None,
                   help="Clearance height for plunge/retract (default: settings)")
    p.add_argument("--arc-samples", type=int, default=None,
                   help="Samples per arc in the curve (default: settings)")

    p.add_argument("--summary", action="store_true",
                   help="Print one line per operation")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Debug logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = AppSettings.load()
    mode = AppMode.OPTIMIZE if args.mode == "optimize" else AppMode.GENERATE
    session = Session(stock=settings.stock())

    for path in args.inputs:
        if not path.exists():
            print(f"Error: input not found: {path}", file=sys.stderr)
            return 1
        try:
            response = parse_oracle_response(path.read_text())
        except OracleError as exc:
            print(f"Error: {path}: {exc}", file=sys.stderr)
            return 1
        session.apply(response, mode)
        print(f"Loaded {path.name}: {response.operation.type.value}")

    artifact = session.last_result
    if artifact is None or not artifact.operations:
        print("Error: no operations to emit", file=sys.stderr)
        return 1

    if args.summary:
        for line in artifact.operation_summary():
            print(f"  {line}")
    if artifact.explanation:
        print(f"  {artifact.explanation}")

    output: Path = args.output or Path(settings.last_save_dir or ".") / settings.program_name
    artifact.save(output)
    print(f"Wrote {output}")

    if args.preview > 0:
        params = CurveBuilderParams(
            safe_z=args.safe_z if args.safe_z is not None else settings.safe_z,
            arc_samples=args.arc_samples or settings.arc_samples,
        )
        program = build_program_curve(artifact.operations, artifact.stock, params)
        xmin, ymin, xmax, ymax = program.bounds
        print(f"Curve: {len(program.path.curves)} pieces, "
              f"bounds X[{fmt(xmin)}, {fmt(xmax)}] Y[{fmt(ymin)}, {fmt(ymax)}]")
        for i, (x, y, z) in enumerate(program.path.sample(args.preview)):
            t = i / args.preview
            print(f"  t={t:.3f}  X{fmt(x)} Y{fmt(y)} Z{fmt(z)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List

from genetic_art.evolve import EvolutionConfig, Evolution
from genetic_art.fitness import DeterminantErrorFunction
from genetic_art.image_io import load_image, load_images
from genetic_art.images import default_catalog, image_instructions
from genetic_art.program import format_program
from genetic_art.registry import InstructionSet, input_instructions, make_catalog
from genetic_art.report import ConsoleReporter
from genetic_art.selection import SelectionMethod
from genetic_art.state import PushState, load_images as push_images


ROOT = Path(__file__).resolve().parents[1]


def _parse_epsilon(raw: str) -> float | None:
    if raw == "auto":
        return None
    return float(raw)


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evolve image-transforming Push programs towards a target image.")
    p.add_argument("--target", required=True, help="Path to the target image.")
    p.add_argument("--inputs", required=True, nargs="+", help="Paths to the input images.")
    p.add_argument("--size", type=int, default=100, help="Square side length every image is resized to.")
    p.add_argument("--grid", type=int, default=10, help="Sections per side used by the determinant error.")
    p.add_argument("--population-size", type=int, default=10)
    p.add_argument("--max-generations", type=int, default=2)
    p.add_argument("--max-initial-program-size", type=int, default=30)
    p.add_argument("--selection", default=SelectionMethod.LEXICASE.value, choices=[m.value for m in SelectionMethod])
    p.add_argument("--tournament-size", type=int, default=10)
    p.add_argument(
        "--epsilon",
        default="auto",
        help="Lexicase tolerance; `auto` uses the per-case standard deviation of the candidates.",
    )
    p.add_argument("--input-instructions", action="store_true", help="Add in1..inN to the instruction catalog.")
    p.add_argument("--fuel", type=int, default=10_000, help="Step budget per program run; 0 disables it.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--results-dir", default="", help="Optional directory for the best image of each generation.")
    p.add_argument(
        "--report-size",
        type=int,
        default=0,
        help="Side length the written best images are scaled to; 0 keeps the working size.",
    )
    p.add_argument("--out-json", default="", help="Optional output summary JSON path.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main() -> None:
    args = _build_arg_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    size = (args.size, args.size)
    target_path = ROOT / args.target
    input_paths = [ROOT / p for p in args.inputs]
    for path in [target_path] + input_paths:
        if not path.exists():
            raise SystemExit(f"missing image file: {path}")
    try:
        epsilon = _parse_epsilon(args.epsilon)
        target = load_image(target_path, size)
        inputs = load_images(input_paths, size)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"invalid arguments: {exc}")

    rng = random.Random(args.seed)
    instructions = InstructionSet(image_instructions(rng))
    catalog = default_catalog()
    if args.input_instructions:
        extra = input_instructions(len(inputs))
        for name, fn in extra.items():
            instructions.register(name, fn)
        catalog = catalog + make_catalog(extra)

    fuel = args.fuel if args.fuel > 0 else None
    cfg = EvolutionConfig(
        catalog=catalog,
        population_size=args.population_size,
        max_generations=args.max_generations,
        max_initial_program_size=args.max_initial_program_size,
        selection_method=SelectionMethod(args.selection),
        tournament_size=args.tournament_size,
        lexicase_epsilon=epsilon,
        seed=args.seed,
    )
    initial_state = push_images(PushState.empty(), inputs)
    error_function = DeterminantErrorFunction(instructions, grid=args.grid, fuel=fuel)
    reporter = ConsoleReporter(
        instructions=instructions,
        initial_state=initial_state,
        inputs=inputs,
        results_dir=(ROOT / args.results_dir) if args.results_dir else None,
        fuel=fuel,
        image_size=(args.report_size, args.report_size) if args.report_size > 0 else None,
    )

    try:
        evolution = Evolution(cfg, error_function, initial_state, inputs, target, report=reporter, rng=rng)
    except ValueError as exc:
        raise SystemExit(f"invalid configuration: {exc}")
    result = evolution.run()

    print(
        f"FINAL status={result.status.value} generation={result.generation} "
        f"best={float(result.best.total_error):.6f} selection={cfg.selection_method.value}"
    )

    if args.out_json:
        out_path = ROOT / args.out_json
        out_path.parent.mkdir(parents=True, exist_ok=True)
        history: List[Dict[str, Any]] = [
            {
                "generation": s.generation,
                "best_total_error": s.best_total_error,
                "mean_total_error": s.mean_total_error,
                "best_size": s.best_size,
                "best_program": s.best_program,
            }
            for s in reporter.summaries
        ]
        out_payload = {
            "meta": {
                "target": str(args.target),
                "inputs": [str(p) for p in args.inputs],
                "population_size": cfg.population_size,
                "max_generations": cfg.max_generations,
                "selection": cfg.selection_method.value,
                "seed": cfg.seed,
            },
            "history": history,
            "final": {
                "status": result.status.value,
                "generation": result.generation,
                "best_total_error": float(result.best.total_error),
                "best_program": format_program(result.best.program),
            },
        }
        out_path.write_text(json.dumps(out_payload, ensure_ascii=True, indent=2), encoding="utf-8")


if __name__ == "__main__":
    main()

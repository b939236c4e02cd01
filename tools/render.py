#!/usr/bin/env python3
"""
Canonical renderer tool: writes a batch of stochastic impulse responses as 16-bit WAV files.

Usage:
    python tools/render.py [options]

Options:
    --sample-rate <int>     Output sample rate in Hz (default: 44100)
    --output-dir <path>     Output directory, created if absent (default: unique timestamped dir)
    --count <int>           Number of impulse responses (default: 5)
    --rt60 / --edt / --itdg / --er-duration   Times in ms
    --drr <float>           Target DRR in dB (default: drawn per run from rt60)
    --seed <int>            Seed of the first response; response i uses seed + i - 1 (default: random)
    --debug                 Save resolved.json with param trace next to each WAV
    --qc                    Run QC analysis
    --mode <str>            "default" or "realistic" (default: default)

Exit codes: 0 all written, 1 some files failed to write, 2 invalid parameters (nothing written).
"""
import sys
import os
import random
import logging
import argparse
from pathlib import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tools.render_core import render_impulse, prepare_params, get_unique_output_dir
from storir.core.types import ConfigurationError
from storir.params.schema import DEFAULT_PRESET

logger = logging.getLogger("storir.render")


def random_drr(rt60_ms: float, rng: random.Random) -> float:
    """Plausible DRR for a room of this RT60: -rt60/100 + U(0, rt60/100) dB."""
    return (rt60_ms * (-1.0 / 100.0)) + rng.uniform(0.0, rt60_ms * (1.0 / 100.0))


def params_from_args(args, rng: random.Random) -> dict:
    params = {
        "sample_rate": args.sample_rate,
        "rt60_ms": args.rt60,
        "edt_ms": args.edt,
        "itdg_ms": args.itdg,
        "er_duration_ms": args.er_duration,
    }
    params["drr_db"] = args.drr if args.drr is not None else random_drr(args.rt60, rng)
    return params


def cmd_batch(args) -> int:
    """Render args.count impulse responses. Write failures are reported and skipped."""
    rng = random.Random(args.seed)
    params = params_from_args(args, rng)

    try:
        resolved, _ = prepare_params(params, args.mode)
    except ConfigurationError as e:
        logger.error("Invalid parameters, nothing rendered: %s", e)
        return 2

    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("rir_batch")
    base_seed = args.seed if args.seed is not None else rng.randint(0, 2**31 - 1)

    logger.info("Saving %d impulses to %s", args.count, output_dir)
    logger.info(
        "rt60=%.1f ms edt=%.1f ms itdg=%.1f ms er=%.1f ms drr=%.2f dB sr=%d",
        resolved["rt60_ms"], resolved["edt_ms"], resolved["itdg_ms"],
        resolved["er_duration_ms"], resolved["drr_db"], resolved["sample_rate"],
    )

    failures = []
    for index in range(1, args.count + 1):
        try:
            audio, debug_info = render_impulse(
                resolved, output_dir, index=index,
                seed=base_seed + index - 1, debug=args.debug, qc=args.qc, mode=args.mode,
                script_name="render.py",
            )
        except (OSError, RuntimeError) as e:
            logger.error("Failed to write impulse %d: %s", index, e)
            failures.append(index)
            continue

        logger.info(
            "[%d/%d] %s (%d samples, sha256 %s...)",
            index, args.count, debug_info["wav_path"],
            audio.shape[-1],
            debug_info["fingerprint"]["sha256"][:16],
        )
        qc = debug_info.get("qc_result")
        if qc:
            logger.info("  QC %s, drr=%s dB", qc["status"], qc["metrics"].get("drr_db"))
            for w in qc["warnings"]:
                logger.warning("  %s", w)

    if failures:
        logger.error("%d of %d impulses failed to write: %s", len(failures), args.count, failures)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render stochastic room impulse responses to WAV"
    )
    parser.add_argument("--sample-rate", type=int, default=DEFAULT_PRESET["sample_rate"], help="Sample rate in Hz")
    parser.add_argument("--output-dir", "--folder", dest="output_dir", type=str,
                        help="Output directory (default: unique timestamped)")
    parser.add_argument("--count", type=int, default=5, help="Number of impulse responses")
    parser.add_argument("--rt60", type=float, default=DEFAULT_PRESET["rt60_ms"], help="Reverberation time [ms]")
    parser.add_argument("--edt", type=float, default=DEFAULT_PRESET["edt_ms"], help="Early decay time [ms]")
    parser.add_argument("--itdg", type=float, default=DEFAULT_PRESET["itdg_ms"], help="Initial time delay gap [ms]")
    parser.add_argument("--er-duration", type=float, default=DEFAULT_PRESET["er_duration_ms"],
                        help="Early reflections duration [ms]")
    parser.add_argument("--drr", type=float, default=None,
                        help="Direct to reverberant ratio [dB] (default: drawn from rt60)")
    parser.add_argument("--seed", type=int, default=None, help="Fixed seed (default: random)")
    parser.add_argument("--debug", action="store_true", help="Save resolved.json with param trace")
    parser.add_argument("--qc", action="store_true", help="Run QC analysis")
    parser.add_argument("--mode", choices=["default", "realistic"], default="default",
                        help="Generation mode: default or realistic (applies clamps)")
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)
    if args.count < 1:
        logger.error("--count must be at least 1")
        return 2
    return cmd_batch(args)


if __name__ == "__main__":
    sys.exit(main())

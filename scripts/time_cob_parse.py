#!/usr/bin/env python3
"""Benchmark COB parsing (and optionally loading) over a directory of files."""

from __future__ import annotations

import argparse
import cProfile
import io
from pathlib import Path
import pstats
import statistics
import time

from tqdm import tqdm

from cobpy.format import to_cob_string
from cobpy.pipeline import load_cob_files, parse_cob


def _collect_cob_files(root: Path) -> dict[str, str]:
    files = sorted([*root.rglob("*.cob"), *root.rglob("*.cobweb")])
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in files
        if path.is_file()
    }


def _run_once(
    sources: dict[str, str],
    *,
    label: str,
    show_progress: bool,
    check_round_trip: bool,
) -> tuple[float, int, int, int]:
    start = time.perf_counter()
    total_sections = 0
    total_diagnostics = 0
    mismatches = 0
    iterator = tqdm(sources.items(), desc=label, unit="file") if show_progress else sources.items()
    for path, text in iterator:
        parsed = parse_cob(text, file=path)
        total_diagnostics += len(parsed.diagnostics)
        if parsed.cob is None:
            continue
        total_sections += len(parsed.cob.sections)
        if check_round_trip and to_cob_string(parsed.cob) != text:
            mismatches += 1
    duration = time.perf_counter() - start
    return duration, total_sections, total_diagnostics, mismatches


def _load_once(sources: dict[str, str]) -> tuple[float, int, int]:
    start = time.perf_counter()
    result = load_cob_files(sources)
    duration = time.perf_counter() - start
    scene_nodes = sum(1 for loaded in result.files.values() for scene in loaded.scenes for _ in scene.walk())
    return duration, scene_nodes, len(result.diagnostics)


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark COB parsing throughput")
    parser.add_argument("root", type=Path, help="Directory containing .cob/.cobweb files")
    parser.add_argument("--runs", type=int, default=5, help="Measured runs")
    parser.add_argument("--warmups", type=int, default=1, help="Warmup runs")
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable tqdm progress bars (useful for pure timing)",
    )
    parser.add_argument(
        "--round-trip",
        action="store_true",
        help="Also serialize every parsed file and count byte mismatches",
    )
    parser.add_argument(
        "--load",
        action="store_true",
        help="After parsing, time one full load (imports, constants, scene macros)",
    )
    parser.add_argument("--profile", action="store_true", help="Run cProfile and print top hotspots")
    parser.add_argument("--profile-top", type=int, default=30, help="Number of cProfile rows to print")
    parser.add_argument("--profile-sort", type=str, default="tottime", help="cProfile sort key")
    args = parser.parse_args()

    root: Path = args.root
    if not root.is_dir():
        raise SystemExit(f"Invalid root directory: {root}")
    sources = _collect_cob_files(root)
    if not sources:
        raise SystemExit(f"No .cob/.cobweb files found under {root}")

    show_progress = not args.no_progress
    warmups = max(args.warmups, 0)
    runs = max(args.runs, 1)

    def _benchmark() -> tuple[list[float], int, int, int]:
        for warmup_idx in range(warmups):
            _run_once(
                sources,
                label=f"warmup {warmup_idx + 1}/{warmups}",
                show_progress=show_progress,
                check_round_trip=False,
            )
        timings: list[float] = []
        sections = diagnostics = mismatches = 0
        for run_idx in range(runs):
            duration, sections, diagnostics, mismatches = _run_once(
                sources,
                label=f"run {run_idx + 1}/{runs}",
                show_progress=show_progress,
                check_round_trip=args.round_trip,
            )
            timings.append(duration)
        return timings, sections, diagnostics, mismatches

    profiler = cProfile.Profile() if args.profile else None
    if profiler is not None:
        profiler.enable()
    timings, sections, diagnostics, mismatches = _benchmark()
    if profiler is not None:
        profiler.disable()
        stream = io.StringIO()
        pstats.Stats(profiler, stream=stream).sort_stats(args.profile_sort).print_stats(max(args.profile_top, 1))
        print("\n[cProfile top functions]")
        print(stream.getvalue())

    mean = statistics.mean(timings)
    print(f"Dataset: {root}")
    print(f"Files: {len(sources)}")
    print(f"Sections: {sections}")
    print(f"Diagnostics: {diagnostics}")
    if args.round_trip:
        print(f"Round-trip mismatches: {mismatches}")
    print(f"Runs: {len(timings)} (warmups={warmups})")
    print(f"Best:   {min(timings):.4f}s")
    print(f"Median: {statistics.median(timings):.4f}s")
    print(f"Mean:   {mean:.4f}s")
    print(f"Worst:  {max(timings):.4f}s")
    print(f"Files/s (mean): {len(sources) / mean:.1f}")

    if args.load:
        duration, scene_nodes, load_diagnostics = _load_once(sources)
        print(f"Load:   {duration:.4f}s ({scene_nodes} scene nodes, {load_diagnostics} diagnostics)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

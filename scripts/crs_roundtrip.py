#!/usr/bin/env python3
"""Cross-check GeoJSON files against an external converter (ogr2ogr by default).

For each input file the converter is run as an opaque subprocess, both
documents are read with the CRS-preserving reader, and the crs / feature
counts are compared. With --restore the converted file is rewritten so it
declares the source crs again.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from glob import glob
from typing import List, Optional, Tuple

# Make crs-backend importable
THIS_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.abspath(os.path.join(THIS_DIR, "..", "crs-backend"))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from app.crs.diagnostics import describe_crs  # type: ignore
from app.logging_setup import configure_logging  # type: ignore
from geodoc.errors import GeoJsonError  # type: ignore
from geodoc.reader import read  # type: ignore
from geodoc.writer import write  # type: ignore
from qc.consistency import check_crs_roundtrip, restore_crs  # type: ignore

logger = logging.getLogger("crs_roundtrip")


def _collect_files(paths: List[str], pattern: str, limit: Optional[int]) -> List[str]:
    pats = [p.strip() for p in pattern.split(",") if p.strip()]
    files: List[str] = []
    for p in paths:
        if os.path.isdir(p):
            for pat in pats:
                files.extend(glob(os.path.join(p, pat)))
        else:
            files.append(p)
    files = sorted(set(files))
    if limit is not None:
        files = files[:limit]
    return files


def run_converter(src: str, dst: str, binary: str) -> Tuple[int, str]:
    """Run ``<binary> -f GeoJSON dst src``; returns (returncode, stderr)."""
    cmd = [binary, "-f", "GeoJSON", dst, src]
    logger.debug("running %s", " ".join(cmd))
    proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    return proc.returncode, proc.stderr.strip()


def check_file(path: str, converted_path: str, restore: bool = False, indent: Optional[int] = 2) -> dict:
    with open(path, "rb") as f:
        source = read(f.read())
    with open(converted_path, "rb") as f:
        converted = read(f.read())
    report = check_crs_roundtrip(source, converted)
    result = {
        "file": path,
        "converted": converted_path,
        "source_crs": describe_crs(source.crs),
        "converted_crs": describe_crs(converted.crs),
        **report,
    }
    if restore and report["suggested_patch"]:
        fixed = restore_crs(converted, source.crs)
        with open(converted_path, "wb") as f:
            f.write(write(fixed, indent=indent))
        result["restored"] = True
    return result


def evaluate_files(files: List[str], binary: str, out_dir: Optional[str], restore: bool) -> List[dict]:
    results: List[dict] = []
    work_dir = out_dir or tempfile.mkdtemp(prefix="crs_roundtrip_")
    for path in files:
        dst = os.path.join(work_dir, os.path.basename(path) + ".converted.geojson")
        if os.path.exists(dst):
            os.unlink(dst)  # the GeoJSON driver refuses to overwrite
        code, err = run_converter(path, dst, binary)
        if code != 0:
            results.append({"file": path, "error": f"converter exited with {code}: {err}"})
            continue
        try:
            results.append(check_file(path, dst, restore=restore))
        except GeoJsonError as e:
            results.append({"file": path, "error": e.to_dict()})
    return results


def _print_pretty(results: List[dict]) -> None:
    for r in results:
        print(f"\n=== {os.path.basename(r['file'])} ===")
        if "error" in r:
            print(f"  error: {r['error']}")
            continue
        print(f"  source crs:    {r['source_crs']['member']}")
        print(f"  converted crs: {r['converted_crs']['member']}")
        if not r["issues"]:
            print("  ok")
        for issue in r["issues"]:
            print(f"  [{issue['severity']}] {issue['field']}: {issue['observed_source']} -> {issue['observed_converted']}")
        if r.get("restored"):
            print(f"  restored crs in {r['converted']}")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Check whether a GeoJSON conversion preserves the crs member.")
    ap.add_argument("paths", nargs="+", help="GeoJSON files or directories")
    ap.add_argument("--pattern", default="*.geojson,*.json", help="Glob(s) used inside directories, comma-separated")
    ap.add_argument("--limit", type=int, default=None, help="Max number of files")
    ap.add_argument("--converter", default=os.getenv("OGR2OGR_BIN", "ogr2ogr"), help="Converter executable")
    ap.add_argument("--out-dir", help="Where converted files are written (default: a temp dir)")
    ap.add_argument("--restore", action="store_true", help="Rewrite converted files with the source crs")
    ap.add_argument("--format", choices=["pretty", "json"], default="pretty")
    args = ap.parse_args(argv)

    if shutil.which(args.converter) is None:
        print(f"Converter not found: {args.converter}")
        return 2
    configure_logging()
    files = _collect_files(args.paths, args.pattern, args.limit)
    if not files:
        print("No files matched. Adjust paths/--pattern.")
        return 1

    results = evaluate_files(files, args.converter, args.out_dir, args.restore)
    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        _print_pretty(results)
    critical = any(i["severity"] == "critical" for r in results for i in r.get("issues", []))
    return 3 if critical else 0


if __name__ == "__main__":
    sys.exit(main())

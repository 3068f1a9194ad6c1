# ================================
# file: main.py
# ================================
"""Project entrypoint: runs door detection on one free-space evidence grid.
- The frame comes from a JSON file, or is estimated from sweep point arrays,
  or (2D evidence only) defaults to one cell per evidence pixel.
- Diagnostics (PGM/PPM/PNG) and an NPZ result are written to --out.

Usage:
    python main.py --evidence ./data/evidence.npy --frame ./data/frame.json
    python main.py --evidence ./data/evidence.npy --points s0.npy s1.npy --out ./out --log
"""
from __future__ import annotations
import argparse
import json
import os
from typing import List, Optional
from datetime import datetime

import numpy as np

from core.config import CLUSTER_TRIALS, DEFAULT_RANDOM_SEED, RESULT_NPZ
from core.errors import ConfigurationError, DoorDetectionError
from core.frame import convert_points_to_sweep, compute_average_distance, compute_frame
from core.types import Frame
from detection import DoorDetector
from appio import DataLogger, log_to_file


def load_frame(evidence: np.ndarray, frame_path: Optional[str], point_paths: Optional[List[str]],
               log_file=None) -> Frame:
    """Frame from JSON, from sweeps, or one cell per pixel of a 2D evidence array."""
    if frame_path:
        with open(frame_path, 'r', encoding='utf-8') as f:
            return Frame.from_dict(json.load(f))
    if point_paths:
        sweeps = [convert_points_to_sweep(np.load(p)) for p in point_paths]
        logger_func = log_to_file if log_file else None
        average_distance = compute_average_distance(sweeps, logger_func, log_file)
        return compute_frame(sweeps, average_distance)
    if evidence.ndim == 2:
        height, width = evidence.shape
        return Frame((width, height, 1), 1.0)
    raise ConfigurationError("Flat evidence array needs --frame or --points")


def run(evidence_path: str, frame_path: Optional[str] = None, point_paths: Optional[List[str]] = None,
        out_dir: str = "door_out", seed: int = DEFAULT_RANDOM_SEED, trials: int = CLUSTER_TRIALS,
        write_log: bool = False, overview: bool = True) -> int:
    """Load inputs, run the detector and write every artifact into out_dir."""
    os.makedirs(out_dir, exist_ok=True)
    log_file = None
    if write_log:
        log_filename = f"door_detection_log_{datetime.now().strftime('%Y%m%d_%H%M%S')}.txt"
        log_file = open(os.path.join(out_dir, log_filename), 'w', encoding='utf-8')
    logger_func = log_to_file if log_file else None

    def log(message: str) -> None:
        if log_file:
            log_to_file(log_file, message)
        else:
            print(f"[MAIN] {message}")

    try:
        log("=" * 60)
        log("门检测运行日志")
        log(f"开始时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        log(f"证据文件: {evidence_path}")
        log(f"随机种子: {seed}, 试验次数: {trials}")
        log("=" * 60)

        evidence = np.load(evidence_path)
        try:
            frame = load_frame(evidence, frame_path, point_paths, log_file)
            log(f"Frame: size={frame.size}, unit={frame.unit:.4f}")
            detector = DoorDetector(trials=trials, seed=seed, debug_dir=out_dir, overview=overview,
                                    logger_func=logger_func, log_file=log_file)
            result = detector.detect(frame, evidence)
        except DoorDetectionError as e:
            log(f"❌ 检测失败: {type(e).__name__}: {e}")
            return 1

        logger = DataLogger()
        logger.log_result(result)
        result_path = os.path.join(out_dir, RESULT_NPZ)
        logger.save(result_path)

        log("=" * 60)
        for t, clustering in enumerate(result.trials):
            log(f"Trial {t}: {clustering.cluster_count()} clusters")
        log(f"结果文件: {result_path}")
        log("=" * 60)
        return 0
    finally:
        # Ensure log file is closed
        if log_file:
            log_file.close()


def _parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Visibility-signature door detection")
    ap.add_argument("--evidence", type=str, required=True, help="free-space evidence .npy (H x W or flat)")
    ap.add_argument("--frame", type=str, default=None, help="frame JSON (size, unit, ranges, axes)")
    ap.add_argument("--points", type=str, nargs="+", default=None,
                    help="sweep point arrays (.npy, first row = scan center) to estimate the frame")
    ap.add_argument("--out", type=str, default="door_out", help="output directory")
    ap.add_argument("--seed", type=int, default=DEFAULT_RANDOM_SEED, help="random seed")
    ap.add_argument("--trials", type=int, default=CLUSTER_TRIALS, help="independent clustering trials")
    ap.add_argument("--log", action="store_true", help="write a timestamped log file into --out")
    ap.add_argument("--no-overview", action="store_true", help="skip the matplotlib overview PNG")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    return run(args.evidence, args.frame, args.points, args.out, args.seed, args.trials,
               write_log=args.log, overview=not args.no_overview)


if __name__ == "__main__":
    raise SystemExit(main())

"""
Batch line detection over a folder of images.

Usage:
    python -m houghfoot.tools.detect_lines -images-dir /path/to/pngs -output-json lines.json

Writes one entry per image with the detected lines (point, direction, clipped
endpoints and vote intensity) and, when -overlay-dir is given, a PNG per image
with the lines drawn on it.
"""
import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import cv2
import numpy as np

from houghfoot.config_line_detection import (
    BLUR_SIGMA,
    DEFAULT_LOCAL_MAX_RADIUS,
    DEFAULT_MAX_LINES,
    DEFAULT_MIN_COUNTS,
    DEFAULT_MIN_DISTANCE_FROM_ORIGIN,
    DEFAULT_THRESHOLD_EDGE,
    DEFAULT_WORKERS,
    MERGE_ANGLE_RADIANS,
    MERGE_DISTANCE_PX,
    DetectorConfig,
)
from houghfoot.detector import DetectLineHoughFoot
from houghfoot.overlay import draw_lines

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")


def _line_record(line, intensity: float, width: int, height: int) -> Dict[str, object]:
    seg = line.clip_to_image(width, height)
    return {
        "x": line.x,
        "y": line.y,
        "slopeX": line.slope_x,
        "slopeY": line.slope_y,
        "segment": [seg.x1, seg.y1, seg.x2, seg.y2] if seg else None,
        "intensity": float(intensity),
    }


def run_detection(
    images_dir: Path,
    detector: DetectLineHoughFoot,
    overlay_dir: Optional[Path] = None,
    blur_sigma: Optional[float] = BLUR_SIGMA,
) -> Dict[str, object]:
    image_paths = sorted(p for p in images_dir.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
    if overlay_dir is not None:
        overlay_dir.mkdir(parents=True, exist_ok=True)

    per_image: List[Dict[str, object]] = []
    counts: List[int] = []
    for image_path in image_paths:
        image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
        if image is None:
            logger.warning("Skipping unreadable image %s", image_path)
            continue

        height, width = image.shape[:2]
        lines = detector.detect_image(image, blur_sigma=blur_sigma)
        records = [
            _line_record(line, intensity, width, height)
            for line, intensity in zip(lines, detector.found_intensity)
        ]
        counts.append(len(records))
        per_image.append(
            {
                "name": image_path.name,
                "width": width,
                "height": height,
                "rawLines": detector.raw_line_count,
                "lines": records,
            }
        )

        if overlay_dir is not None:
            cv2.imwrite(str(overlay_dir / f"{image_path.stem}_lines.png"), draw_lines(image, lines))

    return {
        "config": detector.config.model_dump(),
        "mergeAngle": detector.merge_angle,
        "mergeDistance": detector.merge_distance,
        "global": {
            "images": len(per_image),
            "meanLines": float(np.mean(counts)) if counts else 0.0,
        },
        "perImage": per_image,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Detect lines with a foot-of-norm Hough transform.")
    parser.add_argument("-images-dir", required=True, type=Path, help="Directory containing input images")
    parser.add_argument("-output-json", default="lines.json", help="Where to write results JSON")
    parser.add_argument("-overlay-dir", type=Path, default=None, help="Optional directory for overlay PNGs")
    parser.add_argument("-local-max-radius", type=int, default=DEFAULT_LOCAL_MAX_RADIUS)
    parser.add_argument("-min-counts", type=float, default=DEFAULT_MIN_COUNTS)
    parser.add_argument("-min-distance-from-origin", type=int, default=DEFAULT_MIN_DISTANCE_FROM_ORIGIN)
    parser.add_argument("-threshold-edge", type=float, default=DEFAULT_THRESHOLD_EDGE)
    parser.add_argument("-max-lines", type=int, default=DEFAULT_MAX_LINES)
    parser.add_argument("-workers", type=int, default=DEFAULT_WORKERS)
    parser.add_argument("-merge-angle", type=float, default=MERGE_ANGLE_RADIANS, help="Radians")
    parser.add_argument("-merge-distance", type=float, default=MERGE_DISTANCE_PX, help="Pixels")
    parser.add_argument("-blur-sigma", type=float, default=BLUR_SIGMA, help="0 disables blurring")
    parser.add_argument("-log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = DetectorConfig.create(
        local_max_radius=args.local_max_radius,
        min_counts=args.min_counts,
        min_distance_from_origin=args.min_distance_from_origin,
        threshold_edge=args.threshold_edge,
        max_lines=args.max_lines,
        workers=args.workers,
    )
    detector = DetectLineHoughFoot(config)
    detector.merge_angle = args.merge_angle
    detector.merge_distance = args.merge_distance

    results = run_detection(
        images_dir=args.images_dir,
        detector=detector,
        overlay_dir=args.overlay_dir,
        blur_sigma=args.blur_sigma,
    )

    output_path = Path(args.output_json)
    output_path.write_text(json.dumps(results, indent=2))
    print(f"Wrote line detection results to {output_path}")
    print(json.dumps(results["global"], indent=2))


if __name__ == "__main__":
    main()

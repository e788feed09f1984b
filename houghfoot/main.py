import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np
import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from houghfoot.config_line_detection import BLUR_SIGMA, MERGE_ANGLE_RADIANS, MERGE_DISTANCE_PX, default_config
from houghfoot.detector import DetectLineHoughFoot
from houghfoot.errors import InvalidConfiguration
from houghfoot.overlay import decode_image, draw_lines, encode_overlay

logger = logging.getLogger(__name__)

app = FastAPI(title="houghfoot - foot-of-norm line detection")


class Line(BaseModel):
    id: str
    x: float
    y: float
    slopeX: float
    slopeY: float
    x1: Optional[float] = None
    y1: Optional[float] = None
    x2: Optional[float] = None
    y2: Optional[float] = None
    intensity: float


class DetectionDiagnostics(BaseModel):
    edge_pixel_ratio: Optional[float] = None
    raw_lines: Optional[int] = None
    merged_lines: Optional[int] = None
    notes: Optional[str] = None


class DetectionPreview(BaseModel):
    overlay: Optional[str] = None
    line_count: int = 0
    processing_ms: Optional[int] = None


class DetectionResponse(BaseModel):
    lines: List[Line]
    preview: Optional[DetectionPreview] = None
    diagnostics: Optional[DetectionDiagnostics] = None


class DetectLinesRequest(BaseModel):
    image: str
    localMaxRadius: Optional[int] = None
    minCounts: Optional[float] = None
    minDistanceFromOrigin: Optional[int] = None
    thresholdEdge: Optional[float] = None
    maxLines: Optional[int] = None
    mergeAngle: float = MERGE_ANGLE_RADIANS
    mergeDistance: float = MERGE_DISTANCE_PX
    blurSigma: Optional[float] = BLUR_SIGMA
    overlay: bool = True


def build_detector(
    local_max_radius: Optional[int] = None,
    min_counts: Optional[float] = None,
    min_distance_from_origin: Optional[int] = None,
    threshold_edge: Optional[float] = None,
    max_lines: Optional[int] = None,
    merge_angle: float = MERGE_ANGLE_RADIANS,
    merge_distance: float = MERGE_DISTANCE_PX,
) -> DetectLineHoughFoot:
    try:
        config = default_config(
            local_max_radius=local_max_radius,
            min_counts=min_counts,
            min_distance_from_origin=min_distance_from_origin,
            threshold_edge=threshold_edge,
            max_lines=max_lines,
        )
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    detector = DetectLineHoughFoot(config)
    detector.merge_angle = merge_angle
    detector.merge_distance = merge_distance
    return detector


def detect_lines_opencv(
    image: np.ndarray,
    detector: DetectLineHoughFoot,
    blur_sigma: Optional[float] = BLUR_SIGMA,
    overlay: bool = True,
) -> Tuple[List[Line], DetectionPreview, DetectionDiagnostics]:
    """Run the detector on a decoded image and package the results for the API."""
    start_tick = cv2.getTickCount()
    height, width = image.shape[:2]

    found = detector.detect_image(image, blur_sigma=blur_sigma)

    lines: List[Line] = []
    for i, (line, intensity) in enumerate(zip(found, detector.found_intensity)):
        seg = line.clip_to_image(width, height)
        lines.append(
            Line(
                id=f"line-{i}",
                x=line.x,
                y=line.y,
                slopeX=line.slope_x,
                slopeY=line.slope_y,
                x1=seg.x1 if seg else None,
                y1=seg.y1 if seg else None,
                x2=seg.x2 if seg else None,
                y2=seg.y2 if seg else None,
                intensity=float(intensity),
            )
        )

    diagnostics = DetectionDiagnostics(
        edge_pixel_ratio=float(np.mean(detector.binary > 0)),
        raw_lines=detector.raw_line_count,
        merged_lines=len(lines),
        notes=None if lines else "No line hypotheses found",
    )
    preview = DetectionPreview(
        overlay=encode_overlay(draw_lines(image, found)) if overlay else None,
        line_count=len(lines),
        processing_ms=int((cv2.getTickCount() - start_tick) / cv2.getTickFrequency() * 1000),
    )
    return lines, preview, diagnostics


def _run(image: Optional[np.ndarray], detector: DetectLineHoughFoot, blur_sigma, overlay: bool) -> DetectionResponse:
    if image is None:
        return DetectionResponse(lines=[], diagnostics=DetectionDiagnostics(notes="Could not decode image"))
    try:
        lines, preview, diagnostics = detect_lines_opencv(image, detector, blur_sigma=blur_sigma, overlay=overlay)
    except Exception as exc:
        logger.exception("Line detection failed: %s", exc)
        return DetectionResponse(lines=[], diagnostics=DetectionDiagnostics(notes=f"Line detection failed: {exc}"))
    return DetectionResponse(lines=lines, preview=preview, diagnostics=diagnostics)


@app.post("/api/detect-lines", response_model=DetectionResponse)
async def detect_lines_endpoint(
    file: UploadFile = File(...),
    localMaxRadius: Optional[int] = Form(None),
    minCounts: Optional[float] = Form(None),
    minDistanceFromOrigin: Optional[int] = Form(None),
    thresholdEdge: Optional[float] = Form(None),
    maxLines: Optional[int] = Form(None),
    mergeAngle: float = Form(MERGE_ANGLE_RADIANS),
    mergeDistance: float = Form(MERGE_DISTANCE_PX),
    blurSigma: Optional[float] = Form(BLUR_SIGMA),
):
    detector = build_detector(
        localMaxRadius, minCounts, minDistanceFromOrigin, thresholdEdge, maxLines, mergeAngle, mergeDistance
    )
    contents = await file.read()
    nparr = np.frombuffer(contents, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None
    return _run(image, detector, blurSigma, overlay=True)


@app.post("/api/detect-lines-base64", response_model=DetectionResponse)
async def detect_lines_base64_endpoint(data: DetectLinesRequest):
    detector = build_detector(
        data.localMaxRadius,
        data.minCounts,
        data.minDistanceFromOrigin,
        data.thresholdEdge,
        data.maxLines,
        data.mergeAngle,
        data.mergeDistance,
    )
    try:
        image = decode_image(data.image)
    except ValueError:
        image = None
    return _run(image, detector, data.blurSigma, overlay=data.overlay)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

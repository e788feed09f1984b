import math
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from houghfoot.errors import InvalidConfiguration


def _from_env(name: str, default, cast):
    """Typed environment override; unset or unparsable values keep the default."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    return _from_env(name, default, float)


def _env_int(name: str, default: int) -> int:
    return _from_env(name, default, int)


# Post-processing tolerances, adjustable on the detector after construction
MERGE_ANGLE_RADIANS = _env_float("LINE_MERGE_ANGLE", math.pi * 0.05)
MERGE_DISTANCE_PX = _env_float("LINE_MERGE_DISTANCE", 10.0)

# Gradient pre-processing
BLUR_SIGMA = _env_float("LINE_BLUR_SIGMA", 1.0)
SOBEL_KSIZE = _env_int("LINE_SOBEL_KSIZE", 3)

# Debug overlay
OVERLAY_ALPHA = _env_float("LINE_OVERLAY_ALPHA", 0.6)

# Defaults used by the HTTP API and CLI when a request leaves them out
DEFAULT_LOCAL_MAX_RADIUS = _env_int("LINE_LOCAL_MAX_RADIUS", 5)
DEFAULT_MIN_COUNTS = _env_int("LINE_MIN_COUNTS", 5)
DEFAULT_MIN_DISTANCE_FROM_ORIGIN = _env_int("LINE_MIN_DISTANCE_FROM_ORIGIN", 5)
DEFAULT_THRESHOLD_EDGE = _env_float("LINE_THRESHOLD_EDGE", 30.0)
DEFAULT_MAX_LINES = _env_int("LINE_MAX_LINES", 10)
DEFAULT_WORKERS = _env_int("LINE_WORKERS", 1)


class DetectorConfig(BaseModel):
    """
    Construction parameters for DetectLineHoughFoot.

    local_max_radius: lines in transform space must be a local max in a region with this radius.
    min_counts: minimum number of votes for a transform cell to become a line.
    min_distance_from_origin: peaks this close to the transform origin are ignored.
    threshold_edge: pixels with edge intensity above this value vote.
    max_lines: maximum number of lines returned after pruning.
    """

    model_config = ConfigDict(frozen=True)

    local_max_radius: int = Field(..., ge=0)
    min_counts: float = Field(..., gt=0, allow_inf_nan=False)
    min_distance_from_origin: int = Field(..., ge=0)
    threshold_edge: float = Field(..., allow_inf_nan=False)
    max_lines: int = Field(..., ge=1)
    strict: bool = False
    workers: int = Field(1, ge=1)

    @classmethod
    def create(cls, **kwargs) -> "DetectorConfig":
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise InvalidConfiguration(str(exc)) from exc


def default_config(**overrides) -> DetectorConfig:
    values = {
        "local_max_radius": DEFAULT_LOCAL_MAX_RADIUS,
        "min_counts": DEFAULT_MIN_COUNTS,
        "min_distance_from_origin": DEFAULT_MIN_DISTANCE_FROM_ORIGIN,
        "threshold_edge": DEFAULT_THRESHOLD_EDGE,
        "max_lines": DEFAULT_MAX_LINES,
        "workers": DEFAULT_WORKERS,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return DetectorConfig.create(**values)

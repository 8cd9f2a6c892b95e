"""Transform metric samples into the JSON envelope sent to the sink."""

import calendar
import math
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, field_validator

ENVELOPE_TYPE = "exometer_metric"
NAME_SEPARATOR = "_"

Segment = Union[str, int, Enum]
Datapoint = Union[str, int]


def is_finite_json(value: Any) -> bool:
    """Check that no float inside a JSON value is NaN or infinite."""
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(is_finite_json(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return all(is_finite_json(v) for v in value)
    return True


class MetricBody(BaseModel):
    """Body of a single metric report."""

    name: str
    value: Any
    timestamp: int
    host: str
    instance: Datapoint

    @field_validator("value")
    @classmethod
    def reject_non_finite(cls, v: Any) -> Any:
        """Reject NaN and infinities, which JSON cannot carry."""
        if not is_finite_json(v):
            raise ValueError(f"Metric value must not contain NaN or infinity: {v!r}")
        return v


class ReportEnvelope(BaseModel):
    """Envelope wrapping a metric report on the wire."""

    type: Literal["exometer_metric"] = ENVELOPE_TYPE
    body: MetricBody


def segment_to_str(segment: Segment) -> str:
    """Convert one metric path segment to its string form.

    Args:
        segment: String, integer or symbolic name

    Returns:
        String form of the segment
    """
    if isinstance(segment, Enum):
        return segment.name
    if isinstance(segment, str):
        return segment
    # bool first: it is an int subclass but reads as a symbol
    if isinstance(segment, bool):
        return "true" if segment else "false"
    if isinstance(segment, int):
        return str(segment)
    raise TypeError(f"Unsupported metric segment: {segment!r}")


def format_name(metric: Sequence[Segment]) -> str:
    """Join a metric identifier into an underscore separated name.

    Args:
        metric: Ordered metric path, e.g. ["cpu", "load"]

    Returns:
        Metric name, e.g. "cpu_load"
    """
    if isinstance(metric, (str, bytes)):
        raise TypeError(f"Metric identifier must be a sequence of segments, got {metric!r}")
    if not metric:
        raise ValueError("Metric identifier must not be empty")
    return NAME_SEPARATOR.join(segment_to_str(segment) for segment in metric)


def datapoint_to_instance(datapoint: Union[Datapoint, Enum]) -> Datapoint:
    """Normalize a datapoint label for the envelope."""
    if isinstance(datapoint, Enum):
        return datapoint.name
    return datapoint


def datetime_to_unix_time(dt: datetime) -> int:
    """Convert a datetime to whole seconds since the Unix epoch.

    Naive datetimes are taken as UTC.
    """
    return calendar.timegm(dt.utctimetuple())


def unix_time() -> int:
    """Get the current UTC time in seconds since the Unix epoch."""
    return datetime_to_unix_time(datetime.now(timezone.utc))


def build_envelope(
    metric: Sequence[Segment],
    datapoint: Union[Datapoint, Enum],
    value: Any,
    hostname: str,
) -> ReportEnvelope:
    """Build the envelope for one report, stamped with the current time.

    Args:
        metric: Metric identifier
        datapoint: Datapoint label (e.g. "mean")
        value: JSON serializable value
        hostname: Reported host

    Returns:
        ReportEnvelope object

    Raises:
        ValueError: empty metric, or a NaN or infinite value
    """
    return ReportEnvelope(
        body=MetricBody(
            name=format_name(metric),
            value=value,
            timestamp=unix_time(),
            host=hostname,
            instance=datapoint_to_instance(datapoint),
        )
    )


def envelope_to_dict(envelope: ReportEnvelope) -> dict[str, Any]:
    """Convert an envelope to a dictionary."""
    return envelope.model_dump(mode="json")


def envelope_to_json(envelope: ReportEnvelope) -> bytes:
    """Serialize an envelope to the request body."""
    return envelope.model_dump_json().encode("utf-8")

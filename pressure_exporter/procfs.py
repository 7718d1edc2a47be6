# pressure_exporter/procfs.py
import os
import re
from dataclasses import dataclass
from typing import Union

from .errors import MalformedPressureError, SourceUnavailableError

RESOURCES = ("cpu", "memory", "io")

# ────────────────────────────────────────────────────────────────────────────
# /proc/pressure/<resource> line format
#   some avg10=0.00 avg60=0.00 avg300=0.00 total=5000000
#   full avg10=0.00 avg60=0.00 avg300=0.00 total=1200
# ────────────────────────────────────────────────────────────────────────────
PSI_PATTERN = re.compile(
    r"^(?P<extent>some|full)"
    r" avg10=(?P<avg10>[0-9.]+)"
    r" avg60=(?P<avg60>[0-9.]+)"
    r" avg300=(?P<avg300>[0-9.]+)"
    r" total=(?P<total>[0-9]+)$"
)


@dataclass(frozen=True)
class PSILine:
    avg10: float
    avg60: float
    avg300: float
    total: int  # microseconds since boot


@dataclass(frozen=True)
class Present:
    value: PSILine


class _Absent:
    """Marker for a dimension the kernel does not report."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

Extent = Union[Present, _Absent]


@dataclass(frozen=True)
class PSIStats:
    some: Extent = ABSENT
    full: Extent = ABSENT


def parse_pressure(text: str, source: str = "<pressure>") -> PSIStats:
    """Parse the contents of a pressure file.

    Blank lines are ignored. Anything else that is not a ``some``/``full``
    line, or a repeated extent, is rejected with MalformedPressureError.
    """
    extents = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        match = PSI_PATTERN.match(line)
        if not match:
            raise MalformedPressureError(f"{source}:{lineno}: unexpected line {line!r}")
        extent = match.group("extent")
        if extent in extents:
            raise MalformedPressureError(f"{source}:{lineno}: duplicate {extent!r} line")
        try:
            extents[extent] = PSILine(
                avg10=float(match.group("avg10")),
                avg60=float(match.group("avg60")),
                avg300=float(match.group("avg300")),
                total=int(match.group("total")),
            )
        except ValueError as e:
            raise MalformedPressureError(f"{source}:{lineno}: {e}") from e

    if not extents:
        raise MalformedPressureError(f"{source}: no pressure data")

    return PSIStats(
        some=Present(extents["some"]) if "some" in extents else ABSENT,
        full=Present(extents["full"]) if "full" in extents else ABSENT,
    )


class ProcFS:
    """Accessor for a procfs mount point (conventionally ``/proc``)."""

    def __init__(self, mount_point: str = "/proc"):
        if not os.path.exists(mount_point):
            raise SourceUnavailableError(f"mount point {mount_point} does not exist")
        if not os.path.isdir(mount_point) or not os.access(mount_point, os.R_OK | os.X_OK):
            raise SourceUnavailableError(f"mount point {mount_point} is not a readable directory")
        self.mount_point = mount_point

    def path(self, *parts: str) -> str:
        return os.path.join(self.mount_point, *parts)

    def resource_pressure(self, resource: str) -> PSIStats:
        """Read ``pressure/<resource>``.

        FileNotFoundError propagates untouched: kernels without PSI, or with
        it disabled for this resource, simply lack the file.
        """
        if resource not in RESOURCES:
            raise ValueError(f"unknown pressure resource {resource!r}, expected one of {RESOURCES}")
        path = self.path("pressure", resource)
        with open(path, "r", encoding="ascii") as f:
            try:
                text = f.read()
            except UnicodeDecodeError as e:
                raise MalformedPressureError(f"{path}: {e}") from e
        return parse_pressure(text, source=path)

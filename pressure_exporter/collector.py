# pressure_exporter/collector.py
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .errors import CollectionError
from .procfs import ProcFS, Present, PSIStats

logger = logging.getLogger(__name__)

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
MICROSECONDS_PER_SECOND = 1_000_000


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores, like the Go client does."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


class ValueType(Enum):
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help: str

    def __post_init__(self):
        if not METRIC_NAME_RE.match(self.name):
            raise ValueError(f"invalid metric name {self.name!r}")


@dataclass(frozen=True)
class Sample:
    descriptor: MetricDescriptor
    kind: ValueType
    value: float

    def to_metric(self) -> Metric:
        if self.kind is ValueType.COUNTER:
            return CounterMetricFamily(self.descriptor.name, self.descriptor.help, value=self.value)
        return GaugeMetricFamily(self.descriptor.name, self.descriptor.help, value=self.value)


Sink = Callable[[Sample], None]


class PressureCollector:
    """Exposes PSI totals from ``<procfs>/pressure/{cpu,memory,io}``.

    Every value is a cumulative counter in seconds. Nothing is kept between
    cycles; each ``update`` reads the files afresh.
    """

    name = "pressure"

    def __init__(self, procfs_path: str = "/proc", namespace: str = "node"):
        self.procfs_path = procfs_path
        self.cpu = MetricDescriptor(
            build_fq_name(namespace, "pressure", "wait_for_cpu_seconds_total"),
            "Total time in seconds that processes have waited for CPU time",
        )
        self.io = MetricDescriptor(
            build_fq_name(namespace, "pressure", "wait_for_io_seconds_total"),
            "Total time in seconds that processes have waited due to IO congestion",
        )
        self.io_full = MetricDescriptor(
            build_fq_name(namespace, "pressure", "pause_for_io_seconds_total"),
            "Total time in seconds no process could make progress due to IO congestion",
        )
        self.mem = MetricDescriptor(
            build_fq_name(namespace, "pressure", "wait_for_memory_seconds_total"),
            "Total time in seconds that processes have waited for memory",
        )
        self.mem_full = MetricDescriptor(
            build_fq_name(namespace, "pressure", "pause_for_memory_seconds_total"),
            "Total time in seconds no process could make progress due to memory congestion",
        )

    @property
    def descriptors(self) -> List[MetricDescriptor]:
        return [self.cpu, self.io, self.io_full, self.mem, self.mem_full]

    # ────────────────────────────────────────────────────────────────────────
    # One collection cycle
    # ────────────────────────────────────────────────────────────────────────
    def _fetch(self, fs: ProcFS, resource: str) -> PSIStats:
        try:
            return fs.resource_pressure(resource)
        except FileNotFoundError as e:
            logger.debug(f"could not find {resource} pressure file: {e}")
            return PSIStats()
        except OSError as e:
            raise CollectionError(f"failed to read {resource} pressure: {e}") from e

    def update(self, sink: Sink) -> None:
        """Read pressure data and push up to five counter samples to ``sink``.

        Raises CollectionError (and emits nothing) if procfs cannot be opened
        or any resource fails for a reason other than a missing file.
        """
        fs = ProcFS(self.procfs_path)

        mem = self._fetch(fs, "memory")
        io = self._fetch(fs, "io")
        cpu = self._fetch(fs, "cpu")

        samples = []
        for stats, extent, descriptor in (
            (cpu, "some", self.cpu),
            (mem, "some", self.mem),
            (io, "some", self.io),
            (mem, "full", self.mem_full),
            (io, "full", self.io_full),
        ):
            value = getattr(stats, extent)
            if isinstance(value, Present):
                samples.append(Sample(descriptor, ValueType.COUNTER, value.value.total / MICROSECONDS_PER_SECOND))

        for sample in samples:
            sink(sample)

    # ────────────────────────────────────────────────────────────────────────
    # prometheus_client custom collector protocol
    # ────────────────────────────────────────────────────────────────────────
    def describe(self) -> Iterator[Metric]:
        for descriptor in self.descriptors:
            yield CounterMetricFamily(descriptor.name, descriptor.help)

    def collect(self) -> Iterator[Metric]:
        samples: List[Sample] = []
        self.update(samples.append)
        for sample in samples:
            yield sample.to_metric()

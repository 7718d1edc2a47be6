# pressure_exporter/registry.py
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Protocol

from prometheus_client.core import GaugeMetricFamily, Metric

from .collector import PressureCollector, Sample, build_fq_name
from .errors import CollectionError
from .settings import Settings

logger = logging.getLogger(__name__)


class Collector(Protocol):
    def update(self, sink: Callable[[Sample], None]) -> None:
        ...


Factory = Callable[[Settings], Collector]


@dataclass(frozen=True)
class Registration:
    name: str
    factory: Factory
    default_enabled: bool = True


class CollectorRegistry:
    """Known collectors, filled in explicitly by the process bootstrap."""

    def __init__(self):
        self._registrations: Dict[str, Registration] = {}

    def register(self, name: str, factory: Factory, default_enabled: bool = True) -> None:
        if name in self._registrations:
            raise ValueError(f"collector {name!r} already registered")
        self._registrations[name] = Registration(name, factory, default_enabled)

    def names(self) -> List[str]:
        return sorted(self._registrations)

    def enabled_names(self, settings: Settings) -> List[str]:
        unknown = set(settings.collectors_enabled) | set(settings.collectors_disabled)
        unknown -= set(self._registrations)
        if unknown:
            raise ValueError(f"unknown collectors: {', '.join(sorted(unknown))}")

        enabled = []
        for name in self.names():
            reg = self._registrations[name]
            on = reg.default_enabled or name in settings.collectors_enabled
            if name in settings.collectors_disabled:
                on = False
            if on:
                enabled.append(name)
        return enabled

    def build(self, settings: Settings) -> Dict[str, Collector]:
        collectors = {}
        for name in self.enabled_names(settings):
            collectors[name] = self._registrations[name].factory(settings)
            logger.info(f"enabled collector {name}")
        return collectors


def default_registry() -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(
        "pressure",
        lambda s: PressureCollector(procfs_path=s.procfs_path, namespace=s.namespace),
    )
    return registry


class NodeCollector:
    """Runs every enabled collector once per scrape.

    A failing collector is logged and reported through
    ``<ns>_scrape_collector_success``; the rest of the scrape goes on.
    """

    def __init__(self, collectors: Dict[str, Collector], namespace: str = "node"):
        self.collectors = collectors
        self.namespace = namespace

    def filtered(self, names: Iterable[str]) -> "NodeCollector":
        names = list(names)
        missing = [n for n in names if n not in self.collectors]
        if missing:
            raise KeyError(", ".join(missing))
        return NodeCollector({n: self.collectors[n] for n in names}, self.namespace)

    def _execute(self, name: str, collector: Collector):
        samples: List[Sample] = []
        start = time.perf_counter()
        try:
            collector.update(samples.append)
            success = True
        except CollectionError as e:
            samples = []
            success = False
            duration = time.perf_counter() - start
            logger.error(f"collector {name} failed after {duration:.6f}s: {e}")
        else:
            duration = time.perf_counter() - start
            logger.debug(f"collector {name} succeeded after {duration:.6f}s")
        return samples, duration, success

    def collect(self) -> Iterator[Metric]:
        duration_family = GaugeMetricFamily(
            build_fq_name(self.namespace, "scrape", "collector_duration_seconds"),
            f"{self.namespace}_exporter: Duration of a collector scrape.",
            labels=["collector"],
        )
        success_family = GaugeMetricFamily(
            build_fq_name(self.namespace, "scrape", "collector_success"),
            f"{self.namespace}_exporter: Whether a collector succeeded.",
            labels=["collector"],
        )

        for name, collector in self.collectors.items():
            samples, duration, success = self._execute(name, collector)
            for sample in samples:
                yield sample.to_metric()
            duration_family.add_metric([name], duration)
            success_family.add_metric([name], 1.0 if success else 0.0)

        yield duration_family
        yield success_family

    def describe(self) -> List[Metric]:
        # Output depends on the host; skip the registry's duplicate-name checks.
        return []


def build_node_collector(settings: Settings, registry: Optional[CollectorRegistry] = None) -> NodeCollector:
    registry = registry or default_registry()
    return NodeCollector(registry.build(settings), namespace=settings.namespace)

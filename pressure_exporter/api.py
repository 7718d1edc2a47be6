# pressure_exporter/api.py
import logging
from typing import List, Optional

import prometheus_client
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from prometheus_fastapi_instrumentator import Instrumentator

from .registry import CollectorRegistry, NodeCollector, build_node_collector
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    collectors: Optional[CollectorRegistry] = None,
) -> FastAPI:
    settings = settings or get_settings()
    node = build_node_collector(settings, collectors)

    # ────────────────────────────────────────────────────────────────────────
    # Metrics registry: node collectors + HTTP instrumentation of this app
    # ────────────────────────────────────────────────────────────────────────
    metrics = prometheus_client.CollectorRegistry()
    metrics.register(node)

    app = FastAPI(title="pressure-exporter")
    app.state.settings = settings
    app.state.node_collector = node
    app.state.metrics_registry = metrics

    Instrumentator(
        should_group_status_codes=True,      # e.g. 2xx, 4xx, 5xx
        excluded_handlers=["/metrics"],
        registry=metrics,
    ).instrument(app)

    # ────────────────────────────────────────────────────────────────────────
    # Scrape endpoint
    # ────────────────────────────────────────────────────────────────────────
    @app.get("/metrics", include_in_schema=False)
    def scrape(collect: List[str] = Query(default=[], alias="collect[]")):
        registry = metrics
        if collect:
            try:
                filtered: NodeCollector = node.filtered(collect)
            except KeyError as e:
                logger.warning(f"scrape requested unknown collectors: {e}")
                raise HTTPException(status_code=400, detail=f"unknown collectors: {e.args[0]}")
            registry = prometheus_client.CollectorRegistry()
            registry.register(filtered)
        return Response(
            content=prometheus_client.generate_latest(registry),
            media_type=prometheus_client.CONTENT_TYPE_LATEST,
        )

    @app.get("/health")
    def health():
        return {"ok": True}

    return app

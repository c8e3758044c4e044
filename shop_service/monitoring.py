"""Monitoring and observability setup.

Business instruments are created on the global OpenTelemetry meter, so they
are no-ops until ``init_telemetry`` installs real providers. Exporters are
only configured when an OTLP endpoint is set.
"""
import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
import pyroscope
from sqlalchemy.engine import Engine

from shop_service.config import SERVICE_NAME

logger = logging.getLogger(__name__)


def init_tracing(endpoint: str) -> None:
    """Install a tracer provider exporting spans over OTLP."""
    resource = Resource.create({"service.name": SERVICE_NAME})

    tracer_provider = TracerProvider(resource=resource)
    otlp_span_exporter = OTLPSpanExporter(endpoint=endpoint, insecure=True)
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_span_exporter))
    trace.set_tracer_provider(tracer_provider)

    logger.info(f"Tracing initialized with endpoint: {endpoint}")


def init_metrics(endpoint: str) -> None:
    """Install a meter provider exporting metrics over OTLP."""
    resource = Resource.create({"service.name": SERVICE_NAME})

    otlp_metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=True),
        export_interval_millis=5000
    )
    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[otlp_metric_reader]
    )
    metrics.set_meter_provider(meter_provider)

    logger.info("Metrics initialized with OTLP exporter")


def init_profiling(server_address: str) -> None:
    """Initialize Pyroscope profiling."""
    try:
        pyroscope.configure(
            application_name=SERVICE_NAME,
            server_address=server_address,
        )
        logger.info(f"Profiling initialized with server: {server_address}")
    except Exception as e:
        logger.warning(f"Failed to initialize profiling: {e}")


def init_telemetry(
    app: FastAPI,
    engine: Engine,
    otlp_endpoint: Optional[str],
    pyroscope_server: Optional[str] = None
) -> None:
    """Wire exporters and auto-instrumentation for the configured sinks."""
    if otlp_endpoint:
        init_tracing(otlp_endpoint)
        init_metrics(otlp_endpoint)
        FastAPIInstrumentor.instrument_app(app)
        SQLAlchemyInstrumentor().instrument(engine=engine)
    else:
        logger.info("No OTLP endpoint configured - telemetry export disabled")

    if pyroscope_server:
        init_profiling(pyroscope_server)


meter = metrics.get_meter(__name__)

# Security monitoring metrics
auth_attempts_counter = meter.create_counter(
    "shop.auth.attempts",
    description="Total number of authentication attempts",
    unit="1"
)

auth_failures_counter = meter.create_counter(
    "shop.auth.failures",
    description="Total number of authentication failures",
    unit="1"
)

# Order metrics
orders_placed_counter = meter.create_counter(
    "shop.orders.placed",
    description="Total number of committed orders",
    unit="1"
)

order_rejections_counter = meter.create_counter(
    "shop.orders.rejected",
    description="Total number of rejected orders by reason",
    unit="1"
)

order_amount_histogram = meter.create_histogram(
    "shop.orders.amount",
    description="Order total amount",
    unit="1"
)

stock_decrements_counter = meter.create_counter(
    "shop.products.stock_decrements",
    description="Units removed from stock by committed decrements",
    unit="1"
)

# Catalog metrics
image_uploads_counter = meter.create_counter(
    "shop.products.image_uploads",
    description="Product image uploads by outcome",
    unit="1"
)

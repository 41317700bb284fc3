"""
API Gateway entry point for on-demand image resizing.

The request carries a single query string parameter ``key``, e.g.
``?key=resize/75c06d3b/private/avatar/50x60-img123``. The derivative is
written back to the bucket under that exact key so later requests are
served straight from storage.
"""

import os
from functools import lru_cache
from typing import Any, Dict

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEvent,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from config import ResizeConfig
from errors import BackendFault
from image_operations import PillowTransformer
from orchestrator import DerivativeOrchestrator
from responses import build_response
from s3_operations import S3AssetStorage

SERVICE_NAME = os.getenv("POWERTOOLS_SERVICE_NAME", "image-resize")

logger = Logger(service=SERVICE_NAME, level=os.getenv("LOG_LEVEL", "INFO"))
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(
    namespace=os.getenv("POWERTOOLS_METRICS_NAMESPACE", "image-resize"),
    service=SERVICE_NAME,
)


@lru_cache(maxsize=1)
def get_orchestrator() -> DerivativeOrchestrator:
    """Resolve configuration once per execution environment and reuse it."""
    config = ResizeConfig.from_env()
    logger.info(
        "Loaded resize configuration",
        extra={
            "bucket": config.bucket,
            "allowed_dimensions": list(config.allowed_dimensions),
            "response_mode": config.response_mode.value,
            "key_grammar": config.key_grammar.value,
        },
    )
    return DerivativeOrchestrator(
        config=config,
        storage=S3AssetStorage(config.bucket),
        transformer=PillowTransformer(),
    )


@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@event_source(data_class=APIGatewayProxyEvent)
def lambda_handler(event: APIGatewayProxyEvent, context: LambdaContext) -> Dict[str, Any]:
    key = event.get_query_string_value("key", "") or ""
    orchestrator = get_orchestrator()

    try:
        outcome = orchestrator.process(key)
    except BackendFault as fault:
        logger.exception(
            "Resize failed", extra={"key": key, "category": fault.category.value}
        )
        metrics.add_metric(name="BackendFailures", unit=MetricUnit.Count, value=1)
        raise

    if outcome.succeeded:
        metrics.add_metric(name="DerivativeCreated", unit=MetricUnit.Count, value=1)
    else:
        metrics.add_metric(name="ClientErrors", unit=MetricUnit.Count, value=1)

    return build_response(outcome, orchestrator.config.response_mode)

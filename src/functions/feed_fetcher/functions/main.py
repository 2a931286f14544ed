"""Cloud Function entry point for the feed fetcher.

Each POST runs a single feed poll followed by one image backfill batch and
returns both run summaries.
"""

from __future__ import annotations

import logging
from typing import Any

import flask
from pydantic import ValidationError

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from ..core.config import FetcherConfig, build_fetcher_config, build_store_settings, check_environment
from ..core.db import SupabaseStore
from ..core.pipelines import FeedPollOrchestrator, ImageBackfillOrchestrator, SchedulingLoop

load_env()
setup_logging()
logger = logging.getLogger(__name__)


def feed_fetcher(request: flask.Request) -> flask.Response:
    """Run one fetch cycle.

    The image directory always comes from the process configuration
    (``FETCHER_IMAGE_DIR``); requests cannot choose where files are written.

    Args:
        request: Flask request; an optional JSON body may carry an
            ``image_batch_size`` override

    Returns:
        Flask response with the cycle result
    """

    if request.method == "OPTIONS":
        return _cors_response({}, 204)

    if request.method != "POST":
        return _error_response("Method not allowed", 405)

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return _error_response("JSON payload must be an object", 400)

    try:
        config = build_fetcher_config({"run_once": True})
        check_environment(config)
    except ConfigurationError as exc:
        logger.error("Feed fetcher misconfigured: %s", exc)
        return _error_response(str(exc), 500)

    batch_size = payload.get("image_batch_size")
    if batch_size is not None:
        try:
            config = _with_batch_size(config, batch_size)
        except ValueError as exc:
            return _error_response(f"Invalid image_batch_size: {exc}", 400)

    try:
        store = SupabaseStore(build_store_settings())
        loop = SchedulingLoop(
            FeedPollOrchestrator(store, config),
            ImageBackfillOrchestrator(store, config),
            config,
        )
        result = loop.run_cycle()
    except Exception as exc:
        logger.exception("Feed fetch cycle failed")
        return _error_response(str(exc), 500)

    status = 200 if result.success else 500
    return _cors_response(result.to_dict(), status)


def _with_batch_size(config: FetcherConfig, batch_size: Any) -> FetcherConfig:
    """Return ``config`` with a validated request-supplied batch size."""
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        raise ValueError("must be an integer")
    try:
        return FetcherConfig.model_validate({**config.model_dump(), "image_batch_size": batch_size})
    except ValidationError as exc:
        raise ValueError(exc.errors()[0]["msg"]) from exc


def _cors_response(data: dict[str, Any], status: int = 200) -> flask.Response:
    """Create CORS-enabled response."""
    response = flask.jsonify(data)
    response.status_code = status
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


def _error_response(message: str, status: int = 400) -> flask.Response:
    """Create error response."""
    return _cors_response({"error": message, "status": status}, status)

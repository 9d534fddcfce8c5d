"""Azure Functions entry point — GeoJSON ETL.

Registers the scheduled run and two HTTP helpers using the Python v2
programming model.

All business logic lives in the geojson_etl package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import json
import logging

import azure.functions as func

from geojson_etl.core.config import EtlConfig, config_json_schema
from geojson_etl.core.exceptions import PipelineError
from geojson_etl.orchestrators.geojson_pipeline import run_pipeline
from geojson_etl.sinks import get_sink

app = func.FunctionApp()

logger = logging.getLogger("geojson_etl.function_app")


# ---------------------------------------------------------------------------
# Timer: scheduled ETL run
# ---------------------------------------------------------------------------


@app.function_name("geojson_schedule_trigger")
@app.timer_trigger(schedule="%GEOJSON_SCHEDULE%", arg_name="timer", run_on_startup=False)
def geojson_schedule_trigger(timer: func.TimerRequest) -> None:
    """Run the ETL once per schedule tick.

    Each tick builds a fresh config and sink; nothing carries over from
    the previous run.  Failures are logged and re-raised so the Functions
    host records the invocation as failed.
    """
    if timer.past_due:
        logger.warning("Timer is past due, running anyway")

    config = EtlConfig.from_env()
    summary = run_pipeline(config, get_sink(config))

    logger.info(
        "Scheduled run finished | correlation_id=%s | output=%d | warnings=%d",
        summary["correlation_id"],
        summary["output_features"],
        len(summary["warnings"]),
    )


# ---------------------------------------------------------------------------
# HTTP: input schema
# ---------------------------------------------------------------------------


@app.function_name("geojson_schema")
@app.route(route="schema", methods=["GET"])
def geojson_schema(req: func.HttpRequest) -> func.HttpResponse:
    """Return the JSON Schema of the task-environment options."""
    return func.HttpResponse(
        json.dumps(config_json_schema()),
        status_code=200,
        mimetype="application/json",
    )


# ---------------------------------------------------------------------------
# HTTP: manual run (convenience for local debugging)
# ---------------------------------------------------------------------------


@app.function_name("geojson_manual_run")
@app.route(route="run", methods=["POST"])
def geojson_manual_run(req: func.HttpRequest) -> func.HttpResponse:
    """Run the ETL once and return the run summary.

    Pipeline errors are returned as the structured error payload with the
    status chosen by ``error_status``.  Anything else propagates and the
    host answers 500.
    """
    try:
        config = EtlConfig.from_env()
        summary = run_pipeline(config, get_sink(config))
    except PipelineError as exc:
        return func.HttpResponse(
            json.dumps(exc.to_error_dict()),
            status_code=error_status(exc),
            mimetype="application/json",
        )

    return func.HttpResponse(json.dumps(summary), status_code=200, mimetype="application/json")


def error_status(exc: PipelineError) -> int:
    """HTTP status for a failed manual run: 400 for bad configuration, 502 otherwise."""
    return 400 if exc.stage == "config" else 502

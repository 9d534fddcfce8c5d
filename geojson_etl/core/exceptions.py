"""Error taxonomy shared by every stage of a GeoJSON ETL run.

A run moves through five stages: ``config`` -> ``fetch`` -> ``validate``
-> ``normalize`` -> ``submit``.  Each stage raises a subclass of
``PipelineError`` that names the stage and a stable code, so the run
wrapper can tell a failed attempt worth repeating (only ``fetch``
attempts are) from a run that must abort, and can log or return the
failure as a flat dict.

Categories
----------
- ``ValidationError``  a geometry the normalizer cannot represent.
  Collected as a warning, never aborts the run.
- ``TransientError``   one fetch attempt failed (network, timeout, non-2xx).
- ``PermanentError``   bad configuration or a sink that refused the collection.
- ``ContractError``    the body is not JSON or not a FeatureCollection.
"""

from __future__ import annotations

STAGES = ("config", "fetch", "validate", "normalize", "submit")


class PipelineError(Exception):
    """Base exception for the ETL.

    Subclasses set ``default_stage`` and ``default_code``; the category
    and retry default come from the category class they derive from.

    Attributes:
        message: Human-readable error description.
        stage: One of ``STAGES``, or ``""`` when raised outside a run.
        code: Machine-readable error code (e.g. ``"HTTP_STATUS"``).
        retryable: Whether another fetch attempt may succeed.
        correlation_id: Run that raised the error; stamped by the orchestrator.
    """

    default_stage: str = ""
    default_code: str = ""
    default_category: str = ""
    default_retryable: bool = False

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        if self.default_category:
            return self.default_category
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Flat payload used in run logs and the manual-run HTTP response."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


class ValidationError(PipelineError):
    """Unrepresentable input; reported as a warning."""

    default_category = "validation"


class TransientError(PipelineError):
    """A failed fetch attempt; the fetcher may try again."""

    default_category = "transient"
    default_retryable = True


class PermanentError(PipelineError):
    """The run cannot succeed without operator action."""

    default_category = "permanent"


class ContractError(PipelineError):
    """The source answered, but not with a usable FeatureCollection."""

    default_category = "contract"

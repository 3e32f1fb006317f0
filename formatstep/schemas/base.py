"""Base schema types for formatstep."""

from pydantic import BaseModel, ConfigDict


class StepKey(BaseModel):
    """Serializable cache-equivalence key for a format step.

    Two steps are interchangeable for an up-to-date cache exactly when their
    ``StepKey`` values are equal.  Safe to persist and compare across runs.

    Attributes:
        name: Human-readable step name.
        fingerprint: SHA-256 hex digest of the step's canonical key encoding.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    fingerprint: str


class SpanStats(BaseModel):
    """Aggregated timings for one (step name, phase) pair.

    Attributes:
        name: Step name the spans belong to.
        phase: Instrumented phase (``calculateKey``, ``apply``, ...).
        count: Number of completed spans.
        total_seconds: Sum of span durations.
        max_seconds: Longest single span.
        errors: Spans that ended with an exception.
    """

    name: str
    phase: str
    count: int = 0
    total_seconds: float = 0.0
    max_seconds: float = 0.0
    errors: int = 0

    @property
    def mean_seconds(self) -> float:
        return self.total_seconds / self.count if self.count > 0 else 0.0

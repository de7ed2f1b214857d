"""
Import outcome types.

An ImportResult is the single value the orchestrator returns. It is
retained by the status tracker, keyed by card id, until the next import
of that card or session end.
"""

from dataclasses import dataclass, field
from enum import Enum


class ImportStatus(str, Enum):
    """Terminal (or not-yet-terminal) outcome of one import."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED_VALIDATION = "failed-validation"
    FAILED_REMOTE = "failed-remote"
    PARTIAL = "partial"


class ImportStep(str, Enum):
    """Named steps of the import workflow, in execution order."""

    COLLECTION = "collection"
    PRODUCT = "product"
    IMAGE = "image"
    METADATA = "metadata"
    PRICE = "price"


# Steps whose failure leaves the product in place
ENRICHMENT_STEPS: frozenset[ImportStep] = frozenset(
    {ImportStep.IMAGE, ImportStep.METADATA, ImportStep.PRICE}
)


@dataclass(frozen=True, slots=True)
class StepFailure:
    """A non-fatal enrichment step failure with its underlying message."""

    step: ImportStep
    message: str


@dataclass(frozen=True, slots=True)
class ImportResult:
    """
    Outcome of one product import.

    Attributes:
        status: Overall outcome
        product_id: Shopify product GID (succeeded/partial only)
        product_handle: Shopify product handle (succeeded/partial only)
        product_admin_url: Admin edit link for the product, when known
        error_message: Explanation on any non-succeeded status
        failed_steps: Steps that did not complete
        step_failures: Captured messages for each failed enrichment step
    """

    status: ImportStatus
    product_id: str | None = None
    product_handle: str | None = None
    product_admin_url: str | None = None
    error_message: str | None = None
    failed_steps: frozenset[ImportStep] = field(default_factory=frozenset)
    step_failures: tuple[StepFailure, ...] = ()

    @property
    def is_terminal(self) -> bool:
        """Whether this result ends a workflow run."""
        return self.status is not ImportStatus.PENDING

    @property
    def has_product(self) -> bool:
        """Whether a product exists in the store as a result of this import."""
        return self.product_id is not None

    @classmethod
    def pending(cls) -> "ImportResult":
        return cls(status=ImportStatus.PENDING)

    @classmethod
    def failed_validation(cls, message: str) -> "ImportResult":
        return cls(status=ImportStatus.FAILED_VALIDATION, error_message=message)

    @classmethod
    def failed_remote(cls, step: ImportStep, message: str) -> "ImportResult":
        return cls(
            status=ImportStatus.FAILED_REMOTE,
            error_message=message,
            failed_steps=frozenset({step}),
        )

    @classmethod
    def from_steps(
        cls,
        product_id: str,
        product_handle: str | None,
        failures: list[StepFailure],
        product_admin_url: str | None = None,
    ) -> "ImportResult":
        """
        Compose the result of a run whose product was created.

        No failures means succeeded; any enrichment failure means partial.
        """
        if not failures:
            return cls(
                status=ImportStatus.SUCCEEDED,
                product_id=product_id,
                product_handle=product_handle,
                product_admin_url=product_admin_url,
            )

        summary = "; ".join(f"{f.step.value}: {f.message}" for f in failures)
        return cls(
            status=ImportStatus.PARTIAL,
            product_id=product_id,
            product_handle=product_handle,
            product_admin_url=product_admin_url,
            error_message=f"Product created with incomplete details ({summary})",
            failed_steps=frozenset(f.step for f in failures),
            step_failures=tuple(failures),
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize for API responses."""
        return {
            "status": self.status.value,
            "product_id": self.product_id,
            "product_handle": self.product_handle,
            "product_admin_url": self.product_admin_url,
            "error_message": self.error_message,
            "failed_steps": sorted(s.value for s in self.failed_steps),
            "step_failures": [
                {"step": f.step.value, "message": f.message} for f in self.step_failures
            ],
        }

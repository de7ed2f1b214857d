from tcgbridge.models.card import CardRecord, ImportRequest, UiSelections
from tcgbridge.models.failure import (
    AdminApiError,
    ConfigurationError,
    FailureDetail,
    FailureKind,
    KnownError,
    RemoteFatalError,
    SearchError,
    UserErrorsError,
    ValidationError,
)
from tcgbridge.models.import_result import (
    ENRICHMENT_STEPS,
    ImportResult,
    ImportStatus,
    ImportStep,
    StepFailure,
)

__all__ = [
    "AdminApiError",
    "ConfigurationError",
    "CardRecord",
    "ENRICHMENT_STEPS",
    "FailureDetail",
    "FailureKind",
    "ImportRequest",
    "ImportResult",
    "ImportStatus",
    "ImportStep",
    "KnownError",
    "RemoteFatalError",
    "SearchError",
    "StepFailure",
    "UiSelections",
    "UserErrorsError",
    "ValidationError",
]

"""
Import entry point for the admin UI.

Wires the three pieces of the import workflow together:

    CardRecord --sanitize--> ImportRequest --ProductImporter--> ImportResult
                                  |                                  |
                           StatusTracker.begin            StatusTracker.complete

The UI calls on_import_requested() when the merchant clicks import and
get_status() when it renders a search result.
"""

import logging

from tcgbridge.config import Settings
from tcgbridge.models.card import CardRecord, UiSelections
from tcgbridge.models.failure import ValidationError
from tcgbridge.models.import_result import ImportResult, ImportStatus
from tcgbridge.services.product_importer import AdminClient, ProductImporter
from tcgbridge.services.sanitizer import sanitize
from tcgbridge.services.status_tracker import StatusSnapshot, StatusTracker

logger = logging.getLogger(__name__)


class ImportCoordinator:
    """
    Runs imports on behalf of the UI and keeps the status tracker current.

    Validation happens before the tracker or the admin API is touched, so
    an invalid card never costs a remote call.
    """

    def __init__(
        self,
        tracker: StatusTracker,
        admin_client: AdminClient,
        config: Settings | None = None,
    ) -> None:
        self.tracker = tracker
        self.importer = ProductImporter(admin_client, config)

    async def on_import_requested(
        self,
        record: CardRecord,
        selections: UiSelections | None = None,
    ) -> ImportResult:
        """
        Import a card the merchant clicked.

        Returns:
            The terminal ImportResult, or a pending result if an import of
            the same card is already running (no second run is started).
        """
        try:
            request = sanitize(record, selections)
        except ValidationError as exc:
            logger.info(
                "card_record_rejected",
                extra={"card_id": record.id, "missing_fields": exc.missing_fields},
            )
            result = ImportResult.failed_validation(exc.message)
            if self.tracker.begin(record.id):
                self.tracker.complete(record.id, result)
            return result

        if not self.tracker.begin(record.id):
            return ImportResult.pending()

        try:
            result = await self.importer.import_product(request)
        except BaseException as exc:
            # Includes cancellation; a card must never stay running
            self.tracker.complete(
                record.id,
                ImportResult(
                    status=ImportStatus.FAILED_REMOTE,
                    error_message=str(exc) or type(exc).__name__,
                ),
            )
            raise

        self.tracker.complete(record.id, result)
        return result

    def get_status(self, card_id: str) -> StatusSnapshot:
        """Current import state for a card id."""
        return self.tracker.query(card_id)

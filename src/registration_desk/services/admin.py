"""Admin service for reviewing and exporting registrations."""

from dataclasses import dataclass

from registration_desk.domain.registrations import (
    RegistrationFilter,
    RegistrationRecord,
)
from registration_desk.services.exports import ExportComposer
from registration_desk.services.submissions import SubmissionService


@dataclass
class AdminService:
    """Service for the admin dashboard."""

    submission_service: SubmissionService
    composer: ExportComposer

    def list_registrations(
        self, registration_filter: RegistrationFilter | None = None
    ) -> list[RegistrationRecord]:
        """Return registrations newest first, narrowed by the filter."""
        records = self.submission_service.list_records()
        if registration_filter is None:
            return records
        return [record for record in records if registration_filter.matches(record)]

    def list_summaries(
        self, registration_filter: RegistrationFilter | None = None
    ) -> list[dict[str, object]]:
        """Return serialized registrations for the dashboard table."""
        return [
            record.to_document()
            for record in self.list_registrations(registration_filter)
        ]

    def export_csv(self, registration_filter: RegistrationFilter | None = None) -> str:
        """Return the filtered registrations as CSV."""
        return self.composer.csv_export(self.list_registrations(registration_filter))

    def export_pdf(
        self, registration_filter: RegistrationFilter | None = None
    ) -> bytes:
        """Return the filtered registrations as a table PDF."""
        return self.composer.table_pdf(self.list_registrations(registration_filter))

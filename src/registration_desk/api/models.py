"""Pydantic models for API payloads."""

from typing import Literal

from pydantic import BaseModel

from registration_desk.domain.flows import FAILED, RegistrationFlow
from registration_desk.domain.registrations import RegistrationRecord
from registration_desk.services.sharing import ShareCapabilities, SharePlan


class RecordView(BaseModel):
    """Registration as shown to the registrant."""

    id: str
    name: str
    phone: str
    age: int
    mandalam: str
    mekhala: str
    unit: str
    photo_url: str
    submission_date: str
    accepted_declaration: bool

    @classmethod
    def from_record(cls, record: RegistrationRecord) -> "RecordView":
        return cls.model_validate(record.to_document())


class NoticeView(BaseModel):
    """Dismissible error notice."""

    kind: str
    message: str
    path: str | None = None
    operation: str | None = None


class FlowView(BaseModel):
    """Registration flow state."""

    id: str
    status: str
    provisional: bool
    record: RecordView | None = None
    notice: NoticeView | None = None
    can_retry: bool = False
    updated_at: str

    @classmethod
    def from_flow(cls, flow: RegistrationFlow) -> "FlowView":
        notice = flow.notice
        return cls(
            id=str(flow.id),
            status=flow.status,
            provisional=flow.provisional,
            record=RecordView.from_record(flow.display) if flow.display else None,
            notice=(
                NoticeView(
                    kind=notice.kind,
                    message=notice.message,
                    path=notice.path,
                    operation=notice.operation,
                )
                if notice
                else None
            ),
            can_retry=flow.status == FAILED and flow.draft is not None,
            updated_at=flow.updated_at.isoformat(),
        )


class CapabilitiesPayload(BaseModel):
    """Sharing features the client reports."""

    can_share: bool = False
    can_share_files: bool = False
    clipboard: bool = False

    def to_capabilities(self) -> ShareCapabilities:
        return ShareCapabilities(
            can_share=self.can_share,
            can_share_files=self.can_share_files,
            clipboard=self.clipboard,
        )


class ShareOutcomePayload(BaseModel):
    """Result of a share attempt reported by the client."""

    channel: Literal["share_file", "share_text", "clipboard", "download"]
    outcome: Literal["shared", "cancelled", "failed"]
    capabilities: CapabilitiesPayload = CapabilitiesPayload()


class PlanView(BaseModel):
    """Share plan returned to the client."""

    channel: str
    title: str
    text: str
    url: str | None = None
    download_url: str | None = None

    @classmethod
    def from_plan(cls, plan: SharePlan) -> "PlanView":
        return cls(
            channel=plan.channel,
            title=plan.title,
            text=plan.text,
            url=plan.url,
            download_url=plan.download_url,
        )

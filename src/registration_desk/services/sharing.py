"""Share planning with fallbacks for hosts lacking native sharing."""

import logging
from dataclasses import dataclass, replace

from registration_desk.domain.registrations import RegistrationRecord
from registration_desk.errors import ShareError

logger = logging.getLogger(__name__)

SHARE_FILE = "share_file"
SHARE_TEXT = "share_text"
CLIPBOARD = "clipboard"
DOWNLOAD = "download"

SHARED = "shared"
CANCELLED = "cancelled"
FAILED = "failed"

_CHANNEL_ORDER = (SHARE_FILE, SHARE_TEXT, CLIPBOARD, DOWNLOAD)


@dataclass(frozen=True)
class ShareCapabilities:
    """Optional sharing features reported by the client."""

    can_share: bool = False
    can_share_files: bool = False
    clipboard: bool = False

    def supports(self, channel: str) -> bool:
        """Return true when the host can use the channel."""
        if channel == SHARE_FILE:
            return self.can_share_files
        if channel == SHARE_TEXT:
            return self.can_share
        if channel == CLIPBOARD:
            return self.clipboard
        return channel == DOWNLOAD


@dataclass(frozen=True)
class SharePlan:
    """What the client should attempt, with a download always on hand."""

    channel: str
    title: str
    text: str
    url: str | None
    download_url: str | None


def share_text(record: RegistrationRecord) -> str:
    """Return the structured text shared for a profile."""
    return (
        "Registration Profile:\n\n"
        f"Name: {record.name}\n"
        f"Age: {record.age}\n"
        f"Phone: {record.phone}\n"
        f"Mandalam: {record.mandalam}\n"
        f"Mekhala: {record.mekhala}\n"
        f"Unit: {record.unit}"
    )


@dataclass
class SharingService:
    """Pick a share channel and fall back when the client reports failure."""

    def plan(
        self,
        record: RegistrationRecord,
        capabilities: ShareCapabilities,
        download_url: str,
    ) -> SharePlan:
        """Return the best channel the host supports for a profile."""
        channel = _first_supported(capabilities, _CHANNEL_ORDER)
        return SharePlan(
            channel=channel,
            title="Registration Profile",
            text=share_text(record),
            url=None,
            download_url=download_url,
        )

    def form_link_plan(
        self, form_url: str, capabilities: ShareCapabilities
    ) -> SharePlan:
        """Return the plan for sharing the public form link.

        The link goes to the clipboard first when possible, then to the
        native sheet, so a dismissed sheet still leaves it pasteable.
        """
        channel = _first_supported(capabilities, (CLIPBOARD, SHARE_TEXT, DOWNLOAD))
        return SharePlan(
            channel=channel,
            title="Data Form",
            text="Please fill out the data collection form.",
            url=form_url,
            download_url=None,
        )

    def handle_outcome(
        self,
        plan: SharePlan,
        outcome: str,
        capabilities: ShareCapabilities,
    ) -> SharePlan | None:
        """Resolve a client-reported outcome.

        Returns None when nothing more is needed. A user cancelling the
        native sheet is not an error. A failure raises ShareError carrying
        the next channel to try.
        """
        if outcome == SHARED:
            return None
        if outcome == CANCELLED:
            logger.info("Share dismissed by user", extra={"channel": plan.channel})
            return None
        remaining = _CHANNEL_ORDER[_CHANNEL_ORDER.index(plan.channel) + 1 :]
        if not remaining:
            remaining = (DOWNLOAD,)
        fallback = replace(plan, channel=_first_supported(capabilities, remaining))
        logger.warning(
            "Share failed, falling back",
            extra={"channel": plan.channel, "fallback": fallback.channel},
        )
        raise ShareError(f"Sharing via {plan.channel} failed", fallback=fallback)


def _first_supported(capabilities: ShareCapabilities, channels: tuple[str, ...]) -> str:
    for channel in channels:
        if capabilities.supports(channel):
            return channel
    return DOWNLOAD

"""Built-in handler for actions that send an e-mail."""

import mimetypes
import os
import smtplib
from email.message import EmailMessage
from email.utils import getaddresses
from typing import Any, Dict, List, Optional

import structlog

from ..base import ActionHandler, ActionKind, ActionResult, ActionStatus, EmailAction
from ..registry import register_handler

logger = structlog.get_logger(__name__)

ADDRESS_FIELDS = ("sender", "to", "cc", "bcc", "reply_to")


def split_addresses(value: Optional[str]) -> List[str]:
    """Split a semicolon or comma separated address list."""
    if not value:
        return []
    return [address for _, address in getaddresses([value.replace(";", ",")]) if address]


def _is_address(address: str) -> bool:
    local, _, domain = address.rpartition("@")
    return bool(local) and bool(domain) and " " not in address


@register_handler(ActionKind.SEND_EMAIL, "send_email", "Send an e-mail")
class EmailActionHandler(ActionHandler):
    """Handler for actions that send an e-mail message."""

    kind = ActionKind.SEND_EMAIL
    key_fields = ("sender", "to", "server")

    def _check_fields(self, record: EmailAction) -> Dict[str, str]:
        errors = {}

        for name in ADDRESS_FIELDS:
            value = getattr(record, name)
            if not value or not value.strip():
                if name in self.key_fields:
                    errors[name] = "An address must be specified."
                continue
            addresses = split_addresses(value)
            if not addresses or not all(_is_address(a) for a in addresses):
                errors[name] = "One or more e-mail addresses are not valid."

        server = record.server.strip()
        if not server:
            errors["server"] = "An SMTP server must be specified."
        elif any(c.isspace() for c in server):
            errors["server"] = "The SMTP server name is not valid."

        if any(not isinstance(a, str) or not a.strip() for a in record.attachments):
            errors["attachments"] = "Attachments must be file paths."

        return errors

    def _normalize(self, record: EmailAction) -> Dict[str, Any]:
        changes = super()._normalize(record)
        for name in ADDRESS_FIELDS:
            addresses = split_addresses(getattr(record, name))
            if addresses:
                changes[name] = "; ".join(addresses)
        changes["attachments"] = [a.strip() for a in record.attachments]
        return changes

    def _run(self, record: EmailAction) -> ActionResult:
        message = self._build_message(record)
        recipients = (
            split_addresses(record.to)
            + split_addresses(record.cc)
            + split_addresses(record.bcc)
        )

        logger.info(
            "Sending e-mail",
            server=record.server,
            port=self.settings.smtp_port,
            recipients=len(recipients),
        )

        try:
            with smtplib.SMTP(
                record.server.strip(),
                self.settings.smtp_port,
                timeout=self.settings.smtp_timeout,
            ) as smtp:
                smtp.send_message(message, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send e-mail", server=record.server, error=str(e))
            return ActionResult(
                status=ActionStatus.FAILED,
                message=f"Failed to send e-mail: {e}",
                details={"server": record.server, "error": str(e)},
                execution_time_seconds=0,
            )

        return ActionResult(
            status=ActionStatus.SUCCESS,
            message=f"E-mail sent to {len(recipients)} recipient(s)",
            details={"server": record.server, "recipients": recipients},
            execution_time_seconds=0,
        )

    def _build_message(self, record: EmailAction) -> EmailMessage:
        message = EmailMessage()
        message["From"] = record.sender.strip()
        message["To"] = ", ".join(split_addresses(record.to))
        if record.cc:
            message["Cc"] = ", ".join(split_addresses(record.cc))
        if record.reply_to:
            message["Reply-To"] = ", ".join(split_addresses(record.reply_to))
        message["Subject"] = record.subject or ""
        message.set_content(record.body or "")

        for path in record.attachments:
            mime_type, _ = mimetypes.guess_type(path)
            maintype, _, subtype = (mime_type or "application/octet-stream").partition("/")
            with open(path, "rb") as f:
                message.add_attachment(
                    f.read(),
                    maintype=maintype,
                    subtype=subtype,
                    filename=os.path.basename(path),
                )

        return message

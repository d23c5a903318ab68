"""Append-only messages and notifications attached to an application."""

from typing import List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from volunteer_lifecycle.core.clock import Clock, utc_now
from volunteer_lifecycle.core.errors import ApplicationValidationError
from volunteer_lifecycle.core.models import (
    Attachment,
    Message,
    Notification,
    NotificationType,
    VolunteerApplication,
)
from volunteer_lifecycle.utils.logging import get_logger

logger = get_logger(__name__)


class CommunicationLog:
    """Writes to the message and notification history of an application."""

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self.logger = logger.bind(component="communication_log")

    def send_message(
        self,
        application: VolunteerApplication,
        sender_id: str,
        recipient_id: str,
        subject: str,
        body: str,
        attachments: Optional[Sequence[Union[Attachment, dict]]] = None
    ) -> Message:
        now = self.clock()
        try:
            message = Message(
                sender_id=sender_id,
                recipient_id=recipient_id,
                subject=subject,
                body=body,
                sent_at=now,
                attachments=tuple(attachments or ())
            )
        except ValidationError as e:
            self.logger.warning(
                "Rejected message",
                application_id=application.id,
                error_count=e.error_count()
            )
            raise ApplicationValidationError.from_pydantic("send_message", e) from e

        application.communication.append_message(message)
        application.updated_at = now

        self.logger.info(
            "Message recorded",
            application_id=application.id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            attachments=len(message.attachments)
        )
        return message

    def add_notification(
        self,
        application: VolunteerApplication,
        notification_type: NotificationType,
        title: str,
        body: str,
        action_required: bool = False
    ) -> Notification:
        now = self.clock()
        try:
            notification = Notification(
                type=notification_type,
                title=title,
                body=body,
                sent_at=now,
                action_required=action_required
            )
        except ValidationError as e:
            raise ApplicationValidationError.from_pydantic("add_notification", e) from e

        application.communication.append_notification(notification)
        application.updated_at = now

        self.logger.info(
            "Notification recorded",
            application_id=application.id,
            notification_type=notification.type.value,
            action_required=action_required
        )
        return notification

    @staticmethod
    def notifications_since(
        application: VolunteerApplication,
        cursor: int = 0
    ) -> Tuple[int, List[Notification]]:
        """
        Notifications appended after position ``cursor``.

        Returns the new cursor together with the entries, so a delivery
        collaborator can poll without tracking anything else.
        """
        if cursor < 0:
            raise ApplicationValidationError("notifications_since: cursor must not be negative")
        notifications = application.communication.notifications
        return len(notifications), list(notifications[cursor:])

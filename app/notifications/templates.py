"""Template rendering for match notifications using Jinja2.

Each recipient role has a title template and a message template in the
``app.notifications.message_templates`` package directory.
"""

import logging
from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError, RecipientRole

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders notification title and message text per recipient role.

    Output is plain text stored on the notification record, so autoescaping
    is off; the UI collaborator escapes on display. Templates are cached by
    the Jinja2 environment after first load.
    """

    def __init__(self, template_dir: str = "message_templates"):
        self.env = Environment(
            loader=PackageLoader("app.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, role: RecipientRole, context: Dict[str, Any]) -> Dict[str, str]:
        """Render the title and message for one recipient.

        Args:
            role: Which owner the notification is addressed to
            context: Template variables (``lost``, ``found``, ``score``, ``breakdown``)

        Returns:
            Dictionary with ``title`` (single line) and ``message``

        Raises:
            NotificationTemplateError: If a template is missing or references
                an undefined variable
        """
        role = RecipientRole(role)
        try:
            title = self.env.get_template(f"{role.value}_title.j2").render(context)
            message = self.env.get_template(f"{role.value}_message.j2").render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {role.value}: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        return {
            "title": title.strip().replace("\n", " "),
            "message": message.strip(),
        }

"""Single-call chat handler."""

import logging
from typing import Any, Optional

from services.errors import AssistantError, ErrorCategory, ErrorReport, classify_error
from services.gemini.generator import TextGenerator

LOGGER = logging.getLogger(__name__)


class ChatHandler:
    """Forward one user message to the model and return the reply verbatim."""

    def __init__(self, generator: Optional[TextGenerator]) -> None:
        self.generator = generator

    async def handle(self, message: Any) -> str:
        """Return the generated reply for `message`.

        Raises:
            AssistantError: INVALID_INPUT for a missing message, CONFIGURATION_ERROR
                when no generator is configured, or the classified upstream failure.
        """
        if not isinstance(message, str) or not message.strip():
            raise AssistantError(ErrorReport(ErrorCategory.INVALID_INPUT, "Message is required"))
        if self.generator is None:
            raise AssistantError(ErrorReport.for_category(ErrorCategory.CONFIGURATION_ERROR))

        try:
            return await self.generator.generate([message])
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Error calling Gemini API: %s", exc)
            raise AssistantError(classify_error(str(exc), unknown_prefix="API Error")) from exc

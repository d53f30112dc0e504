"""Two-step damage analysis: describe the damage, then plan its prevention."""

import logging
from typing import List, Optional

from models.image_record import AnalysisResult, ImagePayload
from services.damage.pipeline import Stage, StageFailed, run_pipeline
from services.damage.prompts import build_analysis_prompt, build_prevention_prompt
from services.errors import AssistantError, ErrorCategory, ErrorReport, classify_error
from services.gemini.generator import TextGenerator

LOGGER = logging.getLogger(__name__)

DAMAGE_STAGE = "damage_analysis"
PREVENTION_STAGE = "prevention_instructions"


def build_stages(image: ImagePayload) -> List[Stage]:
    """Return the analysis stage (prompt + image) followed by the prevention stage."""
    return [
        Stage(DAMAGE_STAGE, lambda _previous: [build_analysis_prompt(), image]),
        Stage(PREVENTION_STAGE, lambda analysis: [build_prevention_prompt(analysis or "")]),
    ]


class DamageAnalysisHandler:
    """Analyze one uploaded image for structural damage."""

    def __init__(self, generator: Optional[TextGenerator]) -> None:
        self.generator = generator

    async def handle(self, image: Optional[ImagePayload]) -> AnalysisResult:
        """Run both generation calls in sequence and return their texts.

        Args:
            image: The uploaded image. Its MIME type is forwarded as declared.

        Returns:
            The damage description and the prevention plan derived from it.

        Raises:
            AssistantError: INVALID_INPUT when no image is given, CONFIGURATION_ERROR
                when no generator is configured, or the classified failure of the
                first stage that failed.
        """
        if image is None or not image.data:
            raise AssistantError(ErrorReport(ErrorCategory.INVALID_INPUT, "No image file provided"))
        if self.generator is None:
            raise AssistantError(ErrorReport.for_category(ErrorCategory.CONFIGURATION_ERROR))

        try:
            outputs = await run_pipeline(self.generator, build_stages(image))
        except StageFailed as exc:
            LOGGER.error("Error analyzing image at stage %s: %s", exc.stage, exc.cause)
            raise AssistantError(
                classify_error(str(exc.cause), unknown_prefix="Image analysis failed")
            ) from exc

        return AnalysisResult(
            damage_analysis=outputs[DAMAGE_STAGE],
            prevention_instructions=outputs[PREVENTION_STAGE],
        )

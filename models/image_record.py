from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ImagePayload:
    """An uploaded image as it is forwarded to the model.

    Attributes:
        data: Raw image bytes, exactly as uploaded.
        mime_type: Declared MIME type of the upload; not checked against the content.
        filename: Optional client-side filename, used for the upload message text.
    """

    data: bytes
    mime_type: str = "image/jpeg"
    filename: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    """Output of one damage analysis: the description and the derived prevention plan."""

    damage_analysis: str
    prevention_instructions: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "damageAnalysis": self.damage_analysis,
            "preventionInstructions": self.prevention_instructions,
            "success": True,
        }

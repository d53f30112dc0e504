"""Linear pipeline of dependent generation calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from services.gemini.generator import PromptPart, TextGenerator


@dataclass(frozen=True)
class Stage:
    """One generation call whose prompt is built from the previous stage's output.

    The first stage receives None.
    """

    name: str
    build_parts: Callable[[Optional[str]], List[PromptPart]]


class StageFailed(Exception):
    """A stage's generation call failed; later stages were not run."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Stage '{stage}' failed: {cause}")
        self.stage = stage
        self.cause = cause


async def run_pipeline(generator: TextGenerator, stages: Sequence[Stage]) -> Dict[str, str]:
    """Run `stages` one after another and return each stage's output by name.

    Raises:
        StageFailed: on the first failing stage; no further stages are started.
    """
    outputs: Dict[str, str] = {}
    previous: Optional[str] = None
    for stage in stages:
        parts = stage.build_parts(previous)
        try:
            previous = await generator.generate(parts)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise StageFailed(stage.name, exc) from exc
        outputs[stage.name] = previous
    return outputs

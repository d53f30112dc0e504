import asyncio
import io
from typing import List, Sequence, Union

import pytest
from PIL import Image

from models.image_record import ImagePayload
from services.errors import GenerationError


class StubGenerator:
    """Returns queued outputs in order; queued exceptions are raised instead."""

    def __init__(self, *outputs: Union[str, Exception]) -> None:
        self.outputs: List[Union[str, Exception]] = list(outputs)
        self.calls: List[Sequence] = []

    async def generate(self, parts):
        self.calls.append(list(parts))
        if not self.outputs:
            raise AssertionError("StubGenerator called more times than expected")
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


class GatedGenerator(StubGenerator):
    """Blocks every call until `gate` is set."""

    def __init__(self, gate: asyncio.Event, *outputs: Union[str, Exception]) -> None:
        super().__init__(*outputs)
        self.gate = gate

    async def generate(self, parts):
        self.calls.append(list(parts))
        await self.gate.wait()
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


def png_bytes(size=(640, 480), color=(200, 180, 160)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image():
    return ImagePayload(data=b"\xff\xd8\xff\xe0fake-jpeg", mime_type="image/jpeg", filename="wall.jpg")


@pytest.fixture
def quota_error():
    return GenerationError("quota exceeded for this project")

import asyncio
import itertools

import pytest

from conftest import GatedGenerator, StubGenerator, png_bytes
from models.image_record import ImagePayload
from models.session_models import Author, Channel, ChannelState, MessageKind
from services.chat_handler import ChatHandler
from services.damage.analysis_handler import DamageAnalysisHandler
from services.errors import GenerationError
from services.image_store import ImageStore
from services.session.orchestrator import APOLOGY_TEXT, ChannelBusyError, ClientOrchestrator


def make_orchestrator(chat_generator=None, damage_generator=None, image_store=None, clock=None):
    kwargs = {"image_store": image_store}
    if clock is not None:
        kwargs["clock"] = clock
    return ClientOrchestrator(
        ChatHandler(chat_generator),
        DamageAnalysisHandler(damage_generator),
        **kwargs,
    )


def test_blank_message_is_ignored():
    generator = StubGenerator()
    orchestrator = make_orchestrator(chat_generator=generator)
    assert asyncio.run(orchestrator.send_message("   ")) is None
    assert orchestrator.messages == ()
    assert generator.calls == []


def test_successful_chat_appends_user_then_assistant_and_clears_draft():
    orchestrator = make_orchestrator(chat_generator=StubGenerator("Hi there"))
    reply = asyncio.run(orchestrator.send_message("Hello"))

    user, assistant = orchestrator.messages
    assert (user.author, user.text) == (Author.USER, "Hello")
    assert assistant is reply
    assert (assistant.author, assistant.text, assistant.kind) == (Author.ASSISTANT, "Hi there", MessageKind.PLAIN)
    assert orchestrator.chat_draft == ""
    assert orchestrator.state(Channel.CHAT) is ChannelState.IDLE


def test_failed_chat_appends_apology_and_keeps_draft():
    orchestrator = make_orchestrator(chat_generator=StubGenerator(GenerationError("quota exceeded")))
    reply = asyncio.run(orchestrator.send_message("Hello"))

    assert reply.text == APOLOGY_TEXT
    assert [m.author for m in orchestrator.messages] == [Author.USER, Author.ASSISTANT]
    assert orchestrator.chat_draft == "Hello"
    assert orchestrator.state(Channel.CHAT) is ChannelState.IDLE


def test_resubmission_issues_a_new_call():
    generator = StubGenerator("one", "two")
    orchestrator = make_orchestrator(chat_generator=generator)
    asyncio.run(orchestrator.send_message("Hello"))
    asyncio.run(orchestrator.send_message("Hello"))
    assert [m.text for m in orchestrator.messages] == ["Hello", "one", "Hello", "two"]
    assert len(generator.calls) == 2


def test_chat_channel_rejects_submission_while_pending():
    async def scenario():
        gate = asyncio.Event()
        generator = GatedGenerator(gate, "Hi")
        orchestrator = make_orchestrator(chat_generator=generator)

        first = asyncio.create_task(orchestrator.send_message("one"))
        await asyncio.sleep(0)
        assert orchestrator.state(Channel.CHAT) is ChannelState.PENDING
        with pytest.raises(ChannelBusyError):
            await orchestrator.send_message("two")

        gate.set()
        await first
        return orchestrator, generator

    orchestrator, generator = asyncio.run(scenario())
    assert [m.text for m in orchestrator.messages] == ["one", "Hi"]
    assert len(generator.calls) == 1
    assert orchestrator.state(Channel.CHAT) is ChannelState.IDLE


def test_channels_can_be_pending_together(image):
    async def scenario():
        chat_gate = asyncio.Event()
        damage_gate = asyncio.Event()
        orchestrator = make_orchestrator(
            chat_generator=GatedGenerator(chat_gate, "Hi"),
            damage_generator=GatedGenerator(damage_gate, "Cracks detected", "Seal cracks promptly"),
        )
        chat = asyncio.create_task(orchestrator.send_message("Hello"))
        analysis = asyncio.create_task(orchestrator.analyze_image(image))
        await asyncio.sleep(0)
        assert orchestrator.is_pending(Channel.CHAT)
        assert orchestrator.is_pending(Channel.ANALYSIS)

        damage_gate.set()
        await analysis
        chat_gate.set()
        await chat
        return orchestrator

    orchestrator = asyncio.run(scenario())
    # Completion order: the analysis pair lands before the chat reply.
    assert [m.text for m in orchestrator.messages][0] == "Hello"
    assert orchestrator.messages[-1].text == "Hi"
    assert orchestrator.messages[2].damage_analysis == "Cracks detected"


def test_analysis_appends_upload_and_report_together(image):
    orchestrator = make_orchestrator(damage_generator=StubGenerator("Cracks detected", "Seal cracks promptly"))
    report = asyncio.run(orchestrator.analyze_image(image))

    upload, assistant = orchestrator.messages
    assert upload.author is Author.USER
    assert upload.kind is MessageKind.DAMAGE_REPORT
    assert "wall.jpg" in upload.text
    assert assistant is report
    assert assistant.kind is MessageKind.DAMAGE_REPORT
    assert assistant.damage_analysis == "Cracks detected"
    assert assistant.prevention_instructions == "Seal cracks promptly"
    assert "Cracks detected" in assistant.text and "Seal cracks promptly" in assistant.text
    assert orchestrator.selected_image is None


def test_failed_analysis_still_appends_a_pair_and_clears_selection(image):
    orchestrator = make_orchestrator(
        damage_generator=StubGenerator("Cracks detected", GenerationError("permission denied"))
    )
    report = asyncio.run(orchestrator.analyze_image(image))

    assert report.text == APOLOGY_TEXT
    assert report.damage_analysis is None
    assert [m.author for m in orchestrator.messages] == [Author.USER, Author.ASSISTANT]
    assert orchestrator.selected_image is None
    assert orchestrator.state(Channel.ANALYSIS) is ChannelState.IDLE


def test_missing_image_is_ignored():
    orchestrator = make_orchestrator(damage_generator=StubGenerator())
    assert asyncio.run(orchestrator.analyze_image(None)) is None
    assert orchestrator.messages == ()


def test_uploads_get_thumbnail_references():
    store = ImageStore()
    orchestrator = make_orchestrator(damage_generator=StubGenerator("a", "b"), image_store=store)
    payload = ImagePayload(data=png_bytes(), mime_type="image/png", filename="ceiling.png")
    report = asyncio.run(orchestrator.analyze_image(payload))

    upload = orchestrator.messages[0]
    assert upload.image_ref is not None
    assert report.image_ref == upload.image_ref
    assert store.get(upload.image_ref).startswith(b"\x89PNG")


def test_message_ids_are_strictly_increasing_with_a_frozen_clock():
    orchestrator = make_orchestrator(chat_generator=StubGenerator("a", "b"), clock=lambda: 1700000000.0)
    asyncio.run(orchestrator.send_message("x"))
    asyncio.run(orchestrator.send_message("y"))
    ids = [m.id for m in orchestrator.messages]
    assert ids == [1700000000000, 1700000000001, 1700000000002, 1700000000003]


def test_ids_follow_the_clock():
    ticks = itertools.count(start=1000, step=5)
    orchestrator = make_orchestrator(chat_generator=StubGenerator("a"), clock=lambda: float(next(ticks)))
    asyncio.run(orchestrator.send_message("x"))
    assert [m.id for m in orchestrator.messages] == [1000000, 1005000]


def test_reset_clears_log_and_thumbnails():
    store = ImageStore()
    orchestrator = make_orchestrator(
        chat_generator=StubGenerator(GenerationError("boom")),
        damage_generator=StubGenerator("a", "b"),
        image_store=store,
    )
    asyncio.run(orchestrator.send_message("Hello"))
    asyncio.run(orchestrator.analyze_image(ImagePayload(data=png_bytes(), mime_type="image/png")))
    orchestrator.reset()

    assert orchestrator.messages == ()
    assert orchestrator.chat_draft == ""
    assert len(store) == 0
    snapshot = orchestrator.snapshot()
    assert snapshot["messages"] == []
    assert snapshot["channels"] == {"chat": "idle", "analysis": "idle"}


def test_reset_is_refused_while_a_call_is_in_flight():
    async def scenario():
        gate = asyncio.Event()
        orchestrator = make_orchestrator(chat_generator=GatedGenerator(gate, "Hi"))
        call = asyncio.create_task(orchestrator.send_message("Hello"))
        await asyncio.sleep(0)

        with pytest.raises(ChannelBusyError):
            orchestrator.reset()

        gate.set()
        await call
        return orchestrator

    orchestrator = asyncio.run(scenario())
    assert [(m.author, m.text) for m in orchestrator.messages] == [
        (Author.USER, "Hello"),
        (Author.ASSISTANT, "Hi"),
    ]
    orchestrator.reset()
    assert orchestrator.messages == ()


def test_non_string_message_is_ignored():
    generator = StubGenerator()
    orchestrator = make_orchestrator(chat_generator=generator)
    assert asyncio.run(orchestrator.send_message(5)) is None
    assert generator.calls == []

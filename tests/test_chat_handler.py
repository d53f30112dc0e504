import asyncio

import pytest

from conftest import StubGenerator
from services.chat_handler import ChatHandler
from services.errors import AssistantError, ErrorCategory, GenerationError


@pytest.mark.parametrize("message", ["", None, "   "])
def test_missing_message_is_invalid_input_without_call(message):
    generator = StubGenerator("unused")
    with pytest.raises(AssistantError) as excinfo:
        asyncio.run(ChatHandler(generator).handle(message))
    assert excinfo.value.category is ErrorCategory.INVALID_INPUT
    assert excinfo.value.report.status_code == 400
    assert generator.calls == []


def test_missing_generator_is_configuration_error():
    with pytest.raises(AssistantError) as excinfo:
        asyncio.run(ChatHandler(None).handle("Hello"))
    assert excinfo.value.category is ErrorCategory.CONFIGURATION_ERROR
    assert excinfo.value.report.status_code == 500


def test_reply_is_returned_verbatim():
    generator = StubGenerator("  Hi there\n")
    reply = asyncio.run(ChatHandler(generator).handle("Hello"))
    assert reply == "  Hi there\n"
    assert generator.calls == [["Hello"]]


def test_quota_failure_is_classified(quota_error):
    generator = StubGenerator(quota_error)
    with pytest.raises(AssistantError) as excinfo:
        asyncio.run(ChatHandler(generator).handle("Hello"))
    assert excinfo.value.category is ErrorCategory.QUOTA_EXCEEDED
    assert excinfo.value.report.status_code == 429


def test_unmatched_failure_keeps_raw_message():
    generator = StubGenerator(GenerationError("upstream connect error"))
    with pytest.raises(AssistantError) as excinfo:
        asyncio.run(ChatHandler(generator).handle("Hello"))
    assert excinfo.value.category is ErrorCategory.UNKNOWN
    assert excinfo.value.report.human_message == "API Error: upstream connect error"


def test_unexpected_exception_is_still_classified():
    generator = StubGenerator(RuntimeError("PERMISSION_DENIED"))
    with pytest.raises(AssistantError) as excinfo:
        asyncio.run(ChatHandler(generator).handle("Hello"))
    assert excinfo.value.category is ErrorCategory.PERMISSION_DENIED


def test_identical_messages_are_not_deduplicated():
    generator = StubGenerator("first", "second")
    handler = ChatHandler(generator)
    assert asyncio.run(handler.handle("Hello")) == "first"
    assert asyncio.run(handler.handle("Hello")) == "second"
    assert len(generator.calls) == 2

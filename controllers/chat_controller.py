from typing import Any, Dict

from fastapi import Request

from services.chat_handler import ChatHandler


async def send_chat(request: Request, message: Any) -> Dict[str, Any]:
    """Run one chat generation and return the `{"response": ...}` body.

    Args:
        request: FastAPI Request (used to access the shared generator on app.state).
        message: The user's message text.

    Raises:
        AssistantError: with the classified category when the call cannot be served.
    """
    handler = ChatHandler(getattr(request.app.state, "generator", None))
    text = await handler.handle(message)
    return {"response": text}

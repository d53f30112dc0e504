"""Session orchestrator driving the chat and damage-analysis channels."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.image_record import AnalysisResult, ImagePayload
from models.session_models import Author, Channel, ChannelState, Message, MessageKind
from services.chat_handler import ChatHandler
from services.damage.analysis_handler import DamageAnalysisHandler
from services.errors import AssistantError
from services.image_store import ImageStore

LOGGER = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I encountered an error. Please make sure your Gemini API key is configured correctly."


class ChannelBusyError(RuntimeError):
	"""A submission arrived while the channel already had a call in flight."""

	def __init__(self, channel: Channel) -> None:
		super().__init__(f"The {channel.value} channel is busy; wait for the current request to finish.")
		self.channel = channel


def format_damage_report(result: AnalysisResult) -> str:
	return (
		f"## Damage Analysis\n\n{result.damage_analysis}\n\n"
		f"## Prevention Instructions\n\n{result.prevention_instructions}"
	)


class ClientOrchestrator:
	"""Own the in-memory message log and the Idle/Pending state of each channel.

	Channels are independent: a chat call and an analysis call may be in flight
	at the same time, but each channel accepts one submission at a time. Results
	are appended in completion order. Nothing here retries or caches; every
	submission is a fresh handler call.
	"""

	def __init__(
		self,
		chat_handler: ChatHandler,
		damage_handler: DamageAnalysisHandler,
		image_store: Optional[ImageStore] = None,
		clock: Callable[[], float] = time.time,
	) -> None:
		self.chat_handler = chat_handler
		self.damage_handler = damage_handler
		self.image_store = image_store
		self._clock = clock
		self._messages: List[Message] = []
		self._states: Dict[Channel, ChannelState] = {channel: ChannelState.IDLE for channel in Channel}
		self._last_id = 0
		self.chat_draft = ""
		self.selected_image: Optional[ImagePayload] = None

	@property
	def messages(self) -> Tuple[Message, ...]:
		return tuple(self._messages)

	def state(self, channel: Channel) -> ChannelState:
		return self._states[channel]

	def is_pending(self, channel: Channel) -> bool:
		return self._states[channel] is ChannelState.PENDING

	def _begin(self, channel: Channel) -> None:
		# No await between the check and the set, so this is atomic on the event loop.
		if self.is_pending(channel):
			raise ChannelBusyError(channel)
		self._states[channel] = ChannelState.PENDING

	def _finish(self, channel: Channel) -> None:
		self._states[channel] = ChannelState.IDLE

	def _new_message(self, text: str, author: Author, **fields: Any) -> Message:
		now = self._clock()
		self._last_id = max(int(now * 1000), self._last_id + 1)
		return Message(
			id=self._last_id,
			text=text,
			author=author,
			timestamp=datetime.fromtimestamp(now, tz=timezone.utc),
			**fields,
		)

	async def send_message(self, text: Optional[str]) -> Optional[Message]:
		"""Submit a chat message and return the assistant (or apology) message.

		Blank input is ignored and returns None.

		Raises:
			ChannelBusyError: if a chat call is already pending.
		"""
		if not isinstance(text, str) or not text.strip():
			return None
		self._begin(Channel.CHAT)
		try:
			self.chat_draft = text
			self._messages.append(self._new_message(text, Author.USER))
			try:
				reply = await self.chat_handler.handle(text)
			except AssistantError as exc:
				LOGGER.error("Chat request failed (%s): %s", exc.category.value, exc.report.human_message)
				assistant = self._new_message(APOLOGY_TEXT, Author.ASSISTANT)
			else:
				assistant = self._new_message(reply, Author.ASSISTANT)
				self.chat_draft = ""
			self._messages.append(assistant)
			return assistant
		finally:
			self._finish(Channel.CHAT)

	async def analyze_image(self, image: Optional[ImagePayload]) -> Optional[Message]:
		"""Analyze an uploaded image and return the assistant damage report (or apology).

		The upload message and the result are appended together. A missing image is
		ignored and returns None.

		Raises:
			ChannelBusyError: if an analysis call is already pending.
		"""
		if image is None:
			return None
		self._begin(Channel.ANALYSIS)
		self.selected_image = image
		try:
			image_ref = await self.image_store.save(image.data) if self.image_store is not None else None
			upload = self._new_message(
				f"Uploaded image for damage analysis: {image.filename or 'image'}",
				Author.USER,
				kind=MessageKind.DAMAGE_REPORT,
				image_ref=image_ref,
			)
			try:
				result = await self.damage_handler.handle(image)
			except AssistantError as exc:
				LOGGER.error("Damage analysis failed (%s): %s", exc.category.value, exc.report.human_message)
				assistant = self._new_message(APOLOGY_TEXT, Author.ASSISTANT)
			else:
				assistant = self._new_message(
					format_damage_report(result),
					Author.ASSISTANT,
					kind=MessageKind.DAMAGE_REPORT,
					damage_analysis=result.damage_analysis,
					prevention_instructions=result.prevention_instructions,
					image_ref=image_ref,
				)
			self._messages.extend([upload, assistant])
			return assistant
		finally:
			self.selected_image = None
			self._finish(Channel.ANALYSIS)

	def reset(self) -> None:
		"""Drop the message log, inputs, and stored thumbnails.

		Raises:
			ChannelBusyError: if either channel still has a call in flight.
		"""
		for channel in Channel:
			if self.is_pending(channel):
				raise ChannelBusyError(channel)
		self._messages.clear()
		self.chat_draft = ""
		self.selected_image = None
		if self.image_store is not None:
			self.image_store.clear()

	def snapshot(self) -> Dict[str, Any]:
		return {
			"channels": {channel.value: state.value for channel, state in self._states.items()},
			"chatDraft": self.chat_draft,
			"selectedImage": self.selected_image.filename if self.selected_image else None,
			"messages": [message.to_dict() for message in self._messages],
		}

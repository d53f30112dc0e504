"""Session domain models for the chat and damage-analysis channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Author(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"


class MessageKind(str, Enum):
	PLAIN = "plain"
	DAMAGE_REPORT = "damage-report"


class Channel(str, Enum):
	"""Independent interaction tracks, each with its own pending state."""

	CHAT = "chat"
	ANALYSIS = "analysis"


class ChannelState(str, Enum):
	IDLE = "idle"
	PENDING = "pending"


@dataclass(frozen=True)
class Message:
	"""One entry of the session log; never mutated after it is appended."""

	id: int
	text: str
	author: Author
	timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
	kind: MessageKind = MessageKind.PLAIN
	damage_analysis: Optional[str] = None
	prevention_instructions: Optional[str] = None
	image_ref: Optional[str] = None

	@property
	def is_user(self) -> bool:
		return self.author is Author.USER

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"text": self.text,
			"author": self.author.value,
			"isUser": self.is_user,
			"timestamp": self.timestamp.isoformat(),
			"kind": self.kind.value,
			"damageAnalysis": self.damage_analysis,
			"preventionInstructions": self.prevention_instructions,
			"imageRef": self.image_ref,
		}

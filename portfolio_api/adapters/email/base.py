from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OutgoingEmail:
	"""Provider-neutral description of a transactional email.

	Either ``template_id`` (with ``params``) or ``subject``/``text_content``
	is expected; providers decide how to render each form.
	"""

	sender_name: str
	sender_email: str
	to_email: str
	subject: str | None = None
	text_content: str | None = None
	reply_to: str | None = None
	template_id: int | None = None
	params: dict[str, Any] = field(default_factory=dict)


class AbstractEmailSender(ABC):
	"""Interface for transactional email providers."""

	@abstractmethod
	async def send(self, email: OutgoingEmail) -> None:
		"""Deliver a single email.

		Args:
			email: Message to send.

		Raises:
			EmailDeliveryAppError: If the provider rejects the request or is unreachable.
		"""
		...

"""
Generative-AI slice.

``feedback`` sends the stored document itself (by platform path) together
with the review prompt, so the model reads the original PDF rather than
extracted text.
"""
from __future__ import annotations

from typing import Optional

from rankify.config import settings
from rankify.platform.gateway import OperationGateway
from rankify.platform.types import (
    AIResponse,
    ChatMessage,
    ChatOptions,
    ChatPrompt,
    FileData,
)


class InferenceClient:
    def __init__(self, gateway: OperationGateway, feedback_model: Optional[str] = None) -> None:
        self._gateway = gateway
        self.feedback_model = feedback_model or settings.FEEDBACK_MODEL

    async def chat(
        self, prompt: ChatPrompt, options: Optional[ChatOptions] = None
    ) -> Optional[AIResponse]:
        return await self._gateway.invoke(lambda p: p.ai.chat(prompt, options))

    async def feedback(self, path: str, message: str) -> Optional[AIResponse]:
        messages = [
            ChatMessage(
                role="user",
                content=[
                    {"type": "file", "puter_path": path},
                    {"type": "text", "text": message},
                ],
            )
        ]
        options = ChatOptions(model=self.feedback_model)
        return await self._gateway.invoke(lambda p: p.ai.chat(messages, options))

    async def img2txt(self, image: FileData) -> Optional[str]:
        return await self._gateway.invoke(lambda p: p.ai.img2txt(image))

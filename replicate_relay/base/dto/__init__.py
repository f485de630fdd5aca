"""Pydantic DTOs validating inbound payloads."""

from .chat import ChatCompletionRequestDTO, ContentPartDTO, ImageURLDTO, MessageDTO

__all__ = ["ChatCompletionRequestDTO", "ContentPartDTO", "ImageURLDTO", "MessageDTO"]

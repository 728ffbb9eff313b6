"""
Prolink AI - Provider Message Schemas
=======================================

What:  Provider-neutral request/response types for completion and translation.
How:   ProviderGateway builds these; each CompletionProvider converts them to
       its own wire format (OpenAI chat messages, Gemini contents).

Message content is either plain text or a list of parts. Parts are a tagged
union discriminated by `type`:
    TextPart   {"type": "text", "text": ...}
    ImagePart  {"type": "image_url", "url": ...}
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from prolink_ai.schemas.domain import CamelModel


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    type: Literal["image_url"] = "image_url"
    url: str


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class ChatMessage(BaseModel):
    """One entry of an ordered conversation sent to a completion provider."""
    role: Literal["system", "user"]
    content: Union[str, List[ContentPart]]

    def text(self) -> str:
        """Concatenated text of this message, ignoring image parts."""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(part.text for part in self.content if isinstance(part, TextPart))

    def images(self) -> List[str]:
        """Image references attached to this message, in order."""
        if isinstance(self.content, str):
            return []
        return [part.url for part in self.content if isinstance(part, ImagePart)]


class SamplingParams(BaseModel):
    """
    Capability-specific sampling parameters.

    Passed through to the provider as-is. Out-of-range values are not
    rejected here; the provider decides.
    """
    temperature: float
    max_tokens: int
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None


class TokenUsage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Completion(BaseModel):
    """Text returned by a completion provider plus its token accounting."""
    text: str
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class Translation(BaseModel):
    translated_text: str
    detected_source_language: Optional[str] = None

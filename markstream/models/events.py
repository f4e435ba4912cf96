from typing import Any, List, Optional

from pydantic import BaseModel


class Delta(BaseModel):
    content: Optional[str] = None

    model_config = {"extra": "allow"}


class Choice(BaseModel):
    """One entry of an OpenAI-style streaming chunk."""
    index: Optional[int] = None
    delta: Optional[Delta] = None
    finish_reason: Optional[str] = None

    model_config = {"extra": "allow"}


class TokenEvent(BaseModel):
    """One decoded `data:` payload from the chat backend's event stream.

    The backend is not consistent about where token text lives, so every known
    shape is accepted: {content}, {data: {content}}, {token}, and the
    OpenAI-style {choices: [{delta: {content}}]} chunk. A payload whose
    choices do not have that shape fails validation.
    """
    type: Optional[str] = None
    content: Optional[str] = None
    token: Optional[str] = None
    data: Any = None
    choices: List[Choice] = []
    message: Optional[str] = None
    code: Optional[str] = None
    model: Optional[str] = None

    model_config = {"extra": "allow"}

    def is_error(self) -> bool:
        return self.type == "error"

    def is_token(self) -> bool:
        return self.type in (None, "token")

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.data, dict) and isinstance(self.data.get("content"), str):
            return self.data["content"]
        if isinstance(self.token, str):
            return self.token
        for choice in self.choices:
            if choice.delta is not None and choice.delta.content is not None:
                return choice.delta.content
        return ""

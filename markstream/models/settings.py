from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class SanitizerSettings(BaseSettings):
    """Stream sanitizer settings (env-driven).

    - MARKSTREAM_REASONING_TAGS: comma-separated tag names whose regions are hidden, e.g. "think,reasoning".
    - MARKSTREAM_WRAP_MATH: wrap math-looking phrases in plain text with $...$.
    - MARKSTREAM_NORMALIZE_MATH: prefix a backslash to bare LaTeX command words.
    - MARKSTREAM_STRIP_MARKERS: drop ** markers that enclose nothing before the line ends.
    - MARKSTREAM_MAX_PENDING: most characters held back at a chunk end while a marker is undecided.
    """

    reasoning_tags: str = Field(default="think,reasoning", alias="MARKSTREAM_REASONING_TAGS")
    wrap_math_phrases: bool = Field(default=True, alias="MARKSTREAM_WRAP_MATH")
    normalize_math_commands: bool = Field(default=True, alias="MARKSTREAM_NORMALIZE_MATH")
    remove_stray_markers: bool = Field(default=True, alias="MARKSTREAM_STRIP_MARKERS")
    max_pending_chars: int = Field(default=64, alias="MARKSTREAM_MAX_PENDING")

    model_config = {
        "extra": "ignore",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @field_validator("reasoning_tags")
    def tags_well_formed(cls, v: str) -> str:
        names = [t.strip() for t in v.split(",")]
        for name in names:
            if not name:
                raise ValueError("reasoning tag names must not be empty")
            if any(c in name for c in "<>/") or any(c.isspace() for c in name):
                raise ValueError(f"invalid reasoning tag name: {name!r}")
        return v

    @field_validator("max_pending_chars")
    def pending_fits_marker(cls, v: int) -> int:
        # must at least hold a "**" pair
        if v < 2:
            raise ValueError("max_pending_chars must be at least 2")
        return v

    def tag_names(self) -> List[str]:
        return [t.strip().lower() for t in self.reasoning_tags.split(",")]

"""Option schemas for path-tools operations."""

from typing import Optional

from pydantic import BaseModel, Field


class ListOptions(BaseModel):
    """Options controlling a directory listing."""

    model_config = {"frozen": True}

    dir: bool = Field(default=False, description="Yield directories as well as files")
    hidden: bool = Field(
        default=False, description="Include entries whose name starts with '.'"
    )
    recursive: bool = Field(default=False, description="Walk into subdirectories")
    max_depth: Optional[int] = Field(
        default=None,
        ge=0,
        description="Remaining number of descents, unbounded when unset",
    )

    def can_descend(self) -> bool:
        """Whether subdirectories of the current level may be walked."""
        if not self.recursive:
            return False
        return self.max_depth is None or self.max_depth > 0

    def descend(self) -> "ListOptions":
        """Options for the level below, with the depth budget spent by one."""
        if self.max_depth is None:
            return self
        return self.model_copy(update={"max_depth": self.max_depth - 1})


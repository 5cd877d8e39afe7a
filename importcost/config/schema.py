"""Configuration schema definitions using Pydantic for validation.

Option names follow the editor settings surface (camelCase aliases), while
attributes use snake_case. Regex options are compiled at validation time so
that a bad pattern fails at load instead of on the first keystroke.
"""

import re
from typing import Any, Dict, List, Pattern

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _compile_union(fragments: List[str]) -> Pattern[str]:
    # An empty union must never match, "(?!)" is the canonical never-match.
    return re.compile("|".join(fragments) if fragments else "(?!)")


class ImportCostConfig(BaseModel):
    """Top-level configuration for import extraction and processing.

    Attributes:
        typescript_extensions: Regex fragments identifying typed-dialect files.
        javascript_extensions: Regex fragments identifying untyped-dialect files.
        ignore_paths: Regex patterns tested against raw import specifiers.
        max_manifest_watches: Upper bound on concurrently watched manifests.
        poll_interval: Seconds between manifest polls of the bundled watcher.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    typescript_extensions: List[str] = Field(
        default_factory=lambda: [r"\.tsx?$"], alias="typescriptExtensions"
    )
    javascript_extensions: List[str] = Field(
        default_factory=lambda: [r"\.jsx?$"], alias="javascriptExtensions"
    )
    ignore_paths: List[str] = Field(default_factory=list, alias="ignorePaths")
    max_manifest_watches: int = Field(default=256, ge=1, alias="maxManifestWatches")
    poll_interval: float = Field(default=1.0, gt=0.0, le=60.0, alias="pollInterval")

    @field_validator("typescript_extensions", "javascript_extensions", "ignore_paths")
    @classmethod
    def validate_patterns(cls, v: List[str]) -> List[str]:
        """Validate that every entry is a compilable regular expression."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid regular expression '{pattern}': {exc}") from exc
        return v

    def typescript_regex(self) -> Pattern[str]:
        return _compile_union(self.typescript_extensions)

    def javascript_regex(self) -> Pattern[str]:
        return _compile_union(self.javascript_extensions)

    def source_file_regex(self) -> Pattern[str]:
        """Regex matching any recognized source file of either dialect."""
        return _compile_union(self.typescript_extensions + self.javascript_extensions)

    def ignore_regexes(self) -> List[Pattern[str]]:
        return [re.compile(pattern) for pattern in self.ignore_paths]

    @classmethod
    def default(cls) -> "ImportCostConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportCostConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary, camelCase or snake_case keys.

        Returns:
            ImportCostConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a camelCase dictionary."""
        return self.model_dump(by_alias=True)

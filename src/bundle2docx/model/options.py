"""Conversion options for bundle2docx.

Defaults: exact path matching relative to the resources' common base
directory, ``script`` and ``style`` stripping, and DOCX output.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

MATCH_POLICY_ENV = "BUNDLE2DOCX_MATCH_POLICY"


class MatchPolicy(Enum):
    """How an HTML reference is matched against resource file paths."""

    EXACT = "exact"  # base directory + reference must equal the resource path
    SUFFIX = "suffix"  # resource path must end with the reference


@dataclass
class ConversionOptions:
    """Options controlling one converter instance."""

    match_policy: MatchPolicy = MatchPolicy.EXACT

    # Text that replaces an embedded <img>; "{src}" is the original reference
    placeholder_template: str = "[Embedded Image: {src}]"

    disallowed_tags: tuple[str, ...] = ("script", "style")

    output_format: str = "docx"

    @classmethod
    def from_cli(cls, *, match_policy: str = "exact") -> ConversionOptions:
        """Build ConversionOptions from CLI argument values.

        Raises:
            ValueError: If ``match_policy`` is not a known policy
        """
        try:
            policy = MatchPolicy(match_policy.lower())
        except ValueError as exc:
            valid_values = [p.value for p in MatchPolicy]
            raise ValueError(
                f"Invalid match policy '{match_policy}'. Valid values: {valid_values}"
            ) from exc
        return cls(match_policy=policy)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConversionOptions:
        env = os.environ if environ is None else environ
        value = env.get(MATCH_POLICY_ENV)
        if not value:
            return cls()
        return cls.from_cli(match_policy=value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization/logging."""
        return {
            "match_policy": self.match_policy.value,
            "placeholder_template": self.placeholder_template,
            "disallowed_tags": list(self.disallowed_tags),
            "output_format": self.output_format,
        }

    def __repr__(self) -> str:
        return (
            f"ConversionOptions("
            f"match_policy={self.match_policy.value}, "
            f"placeholder_template={self.placeholder_template!r}, "
            f"disallowed_tags={self.disallowed_tags!r}, "
            f"output_format={self.output_format!r}"
            f")"
        )


__all__ = ["MATCH_POLICY_ENV", "MatchPolicy", "ConversionOptions"]

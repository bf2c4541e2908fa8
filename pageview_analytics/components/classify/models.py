"""
Classifier component models.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class DeviceClass(str, Enum):
    """Device classification."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


UNKNOWN = "Unknown"
DIRECT = "Direct"
REFERRAL = "Referral"


@dataclass(frozen=True)
class BrowserInfo:
    """Browser name and version parsed from a user agent."""

    name: str = UNKNOWN
    version: str = ""


@dataclass(frozen=True)
class ClientInfo:
    """Everything derived from one user-agent string."""

    device_type: DeviceClass
    browser: BrowserInfo
    os: str


@dataclass(frozen=True)
class SourceRule:
    """Referrer substring mapped to a traffic-source label."""

    pattern: str
    source: str


@dataclass(frozen=True)
class BrowserRule:
    """
    One entry of the browser precedence chain.

    matches decides whether the rule applies; version_pattern is a regex whose
    first group is the version number.
    """

    name: str
    matches: Callable[[str], bool]
    version_pattern: str


@dataclass(frozen=True)
class ClassifierConfig:
    """Traffic-source classification configuration."""

    source_rules: tuple[SourceRule, ...] = field(
        default_factory=lambda: (
            SourceRule("google.com", "Google"),
            SourceRule("bing.com", "Bing"),
            SourceRule("facebook.com", "Facebook"),
            SourceRule("twitter.com", "Twitter"),
            SourceRule("t.co", "Twitter"),
            SourceRule("linkedin.com", "LinkedIn"),
        ),
    )

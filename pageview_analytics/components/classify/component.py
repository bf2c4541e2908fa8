"""
Classifier component - User agent and referrer classification.

Pure functions, no I/O. Every classifier walks an ordered rule list and the
first matching rule wins.

Key behaviors:
- Device: tablet rule runs before mobile (several tablets carry generic mobile tokens)
- Browser: Firefox, Chrome (not Edge), Safari (not Chrome), Edge, Internet Explorer
- OS: Windows, macOS, Linux, Android, iOS by plain substring
- Traffic source: empty referrer is Direct, known hosts by substring, else Referral
"""

from __future__ import annotations

import re

from .models import (
    DIRECT,
    REFERRAL,
    UNKNOWN,
    BrowserInfo,
    BrowserRule,
    ClassifierConfig,
    ClientInfo,
    DeviceClass,
    SourceRule,
)

DEFAULT_CONFIG = ClassifierConfig()


# --- Rule Tables ---

# Order is load-bearing: "Android" without "mobi" is a tablet, with it a phone.
DEVICE_RULES: tuple[tuple[re.Pattern[str], DeviceClass], ...] = (
    (
        re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE),
        DeviceClass.TABLET,
    ),
    (
        re.compile(
            r"Mobile|Android|iP(hone|od)|IEMobile|BlackBerry|Kindle|Silk-Accelerated"
            r"|(hpw|web)OS|Opera M(obi|ini)"
        ),
        DeviceClass.MOBILE,
    ),
)

# Chrome user agents contain "Safari" and Edge ones contain "Chrome",
# so each rule excludes the tokens of the vendors that embed it.
BROWSER_RULES: tuple[BrowserRule, ...] = (
    BrowserRule(
        name="Firefox",
        matches=lambda ua: "Firefox" in ua,
        version_pattern=r"Firefox/([0-9.]+)",
    ),
    BrowserRule(
        name="Chrome",
        matches=lambda ua: "Chrome" in ua and "Edg" not in ua,
        version_pattern=r"Chrome/([0-9.]+)",
    ),
    BrowserRule(
        name="Safari",
        matches=lambda ua: "Safari" in ua and "Chrome" not in ua,
        version_pattern=r"Version/([0-9.]+)",
    ),
    BrowserRule(
        name="Edge",
        matches=lambda ua: "Edg" in ua,
        version_pattern=r"Edg/([0-9.]+)",
    ),
    BrowserRule(
        name="Internet Explorer",
        matches=lambda ua: "MSIE" in ua or "Trident" in ua,
        version_pattern=r"(?:MSIE |rv:)([0-9.]+)",
    ),
)

OS_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Win",), "Windows"),
    (("Mac",), "macOS"),
    (("Linux",), "Linux"),
    (("Android",), "Android"),
    (("iOS", "iPhone", "iPad"), "iOS"),
)


# --- Pure Functions ---


def classify_device(user_agent: str | None) -> DeviceClass:
    """
    Classify the device behind a user agent.

    Falls back to desktop when neither the tablet nor the mobile rule matches,
    including for an empty user agent.
    """
    ua = user_agent or ""
    for pattern, device in DEVICE_RULES:
        if pattern.search(ua):
            return device
    return DeviceClass.DESKTOP


def classify_browser(user_agent: str | None) -> BrowserInfo:
    """
    Detect browser name and version.

    A missing version token yields an empty version string, not an error.
    """
    ua = user_agent or ""
    for rule in BROWSER_RULES:
        if rule.matches(ua):
            match = re.search(rule.version_pattern, ua)
            return BrowserInfo(name=rule.name, version=match.group(1) if match else "")
    return BrowserInfo()


def classify_os(user_agent: str | None) -> str:
    """Detect operating system; Unknown when nothing matches."""
    ua = user_agent or ""
    for tokens, name in OS_RULES:
        if any(token in ua for token in tokens):
            return name
    return UNKNOWN


def classify_client(user_agent: str | None) -> ClientInfo:
    """Run every user-agent classifier at once."""
    return ClientInfo(
        device_type=classify_device(user_agent),
        browser=classify_browser(user_agent),
        os=classify_os(user_agent),
    )


def classify_traffic_source(
    referrer: str | None,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> str:
    """
    Map a referrer URL to a traffic-source label.

    Substring match against the full referrer, in configured order.
    """
    if not referrer:
        return DIRECT

    for rule in config.source_rules:
        if rule.pattern in referrer:
            return rule.source

    return REFERRAL


def build_classifier_config(rules: list[tuple[str, str]] | None) -> ClassifierConfig:
    """Build a classifier config from (pattern, source) pairs; None keeps defaults."""
    if rules is None:
        return DEFAULT_CONFIG
    return ClassifierConfig(
        source_rules=tuple(SourceRule(pattern=p, source=s) for p, s in rules),
    )

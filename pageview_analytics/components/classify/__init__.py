"""
Classifier component - Device, browser, OS and traffic-source detection.
"""

from .component import (
    BROWSER_RULES,
    DEFAULT_CONFIG,
    DEVICE_RULES,
    OS_RULES,
    build_classifier_config,
    classify_browser,
    classify_client,
    classify_device,
    classify_os,
    classify_traffic_source,
)
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

__all__ = [
    # Pure functions
    "classify_browser",
    "classify_client",
    "classify_device",
    "classify_os",
    "classify_traffic_source",
    "build_classifier_config",
    # Rule tables
    "BROWSER_RULES",
    "DEVICE_RULES",
    "OS_RULES",
    "DEFAULT_CONFIG",
    # Models
    "BrowserInfo",
    "BrowserRule",
    "ClassifierConfig",
    "ClientInfo",
    "DeviceClass",
    "SourceRule",
    "DIRECT",
    "REFERRAL",
    "UNKNOWN",
]

from pydantic import BaseModel, ConfigDict, Field

from pageview_analytics.components.aggregate import ReportConfig
from pageview_analytics.components.classify import build_classifier_config
from pageview_analytics.components.identity import IdentityConfig


class SessionRules(BaseModel):
    timeout_minutes: int = Field(30, gt=0)


class ReportRules(BaseModel):
    top_pages_limit: int = Field(10, gt=0)
    recent_activity_limit: int = Field(20, gt=0)
    row_limit: int = Field(10_000, gt=0)
    default_range: str = "7d"


class TrafficSourceRule(BaseModel):
    pattern: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)


class ApiRules(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


DEFAULT_TRAFFIC_SOURCES = [
    TrafficSourceRule(pattern="google.com", source="Google"),
    TrafficSourceRule(pattern="bing.com", source="Bing"),
    TrafficSourceRule(pattern="facebook.com", source="Facebook"),
    TrafficSourceRule(pattern="twitter.com", source="Twitter"),
    TrafficSourceRule(pattern="t.co", source="Twitter"),
    TrafficSourceRule(pattern="linkedin.com", source="LinkedIn"),
]


class AnalyticsRules(BaseModel):
    """Top-level rules file; every section is optional."""

    model_config = ConfigDict(extra="forbid")

    session: SessionRules = Field(default_factory=SessionRules)
    report: ReportRules = Field(default_factory=ReportRules)
    # Order matters: first matching pattern wins.
    traffic_sources: list[TrafficSourceRule] = Field(
        default_factory=lambda: list(DEFAULT_TRAFFIC_SOURCES)
    )
    api: ApiRules = Field(default_factory=ApiRules)

    def identity_config(self) -> IdentityConfig:
        return IdentityConfig(session_timeout_minutes=self.session.timeout_minutes)

    def report_config(self) -> ReportConfig:
        return ReportConfig(
            top_pages_limit=self.report.top_pages_limit,
            recent_activity_limit=self.report.recent_activity_limit,
            row_limit=self.report.row_limit,
            default_range=self.report.default_range,
            classifier=build_classifier_config(
                [(rule.pattern, rule.source) for rule in self.traffic_sources]
            ),
        )

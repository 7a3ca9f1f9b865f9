from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class SlackConfig:
    webhook_url: str
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class JiraConfig:
    site: str
    email: str
    api_token: str
    project_key: str
    issue_type: str = "Task"
    timeout_seconds: float = 10.0

    @property
    def issue_url(self) -> str:
        return f"{self.site.rstrip('/')}/rest/api/3/issue"


class Settings(BaseSettings):
    app_name: str = "Formrelay API"
    app_env: str = "development"
    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"
    request_id_header: str = "X-Request-ID"

    # Host of the form-building service; `www.<host>/uploads/...` links are
    # rewritten to `files.<host>/jufs/...`.
    form_host: str = "jotform.com"
    answer_source: str = "pretty"  # pretty|raw
    form_api_base_url: str = "https://api.jotform.com"
    form_api_key: str = ""
    schema_timeout_seconds: float = 5.0

    slack_webhook_url: str = ""
    jira_site: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    jira_project_key: str = ""
    jira_issue_type: str = "Task"
    sink_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def slack_config(self) -> SlackConfig | None:
        webhook_url = self.slack_webhook_url.strip()
        if not webhook_url:
            return None
        return SlackConfig(webhook_url=webhook_url, timeout_seconds=self.sink_timeout_seconds)

    def jira_config(self) -> JiraConfig | None:
        values = [
            self.jira_site.strip(),
            self.jira_email.strip(),
            self.jira_api_token.strip(),
            self.jira_project_key.strip(),
        ]
        if not all(values):
            return None
        site, email, api_token, project_key = values
        return JiraConfig(
            site=site,
            email=email,
            api_token=api_token,
            project_key=project_key,
            issue_type=self.jira_issue_type.strip() or "Task",
            timeout_seconds=self.sink_timeout_seconds,
        )


settings = Settings()

"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Connector selection ──────────────────────────────────────────────
    connector: str = "servicenow"        # which connector this process serves
    connector_version: str = "1.0.0"

    # ── Localization ─────────────────────────────────────────────────────
    default_locale: str = "en"

    # ── Backend HTTP ─────────────────────────────────────────────────────
    http_timeout_seconds: float = 30.0

    # ── Hub authentication ───────────────────────────────────────────────
    hub_auth_secret: str = ""            # HMAC secret for hub tokens; empty disables the check

    # ── ServiceNow ───────────────────────────────────────────────────────
    servicenow_query_limit: int = 10000  # sysparm_limit for table queries

    # ── Salesforce ───────────────────────────────────────────────────────
    salesforce_api_version: str = "v44.0"

    # ── AirWatch / app catalog ───────────────────────────────────────────
    greenbox_url: str = ""               # app catalog base URL used by the install action
    managed_apps_file: str = ""          # path to managed_apps.yaml (defaults to config/)

    # ── Coupa ────────────────────────────────────────────────────────────
    coupa_api_key: str = ""              # service credential; overrides the caller header

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


config = Settings()

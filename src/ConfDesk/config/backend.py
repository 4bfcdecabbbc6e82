"""Backend domain configuration: where the hosted database and storage live."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ConfDesk.config.common import (
    check_non_empty,
    check_positive,
    expect_int,
    expect_str,
    get_optional_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class BackendConfig:
    """Names of the environment variables holding backend secrets, plus storage knobs.

    Attributes:
        url_env: Environment variable with the project URL.
        key_env: Environment variable with the anon (public) key.
        email_env: Environment variable with the sign-in email.
        password_env: Environment variable with the sign-in password.
        storage_bucket: Object storage bucket for article files.
        signed_url_ttl: Lifetime of signed file URLs in seconds.
    """

    url_env: str
    key_env: str
    email_env: str
    password_env: str
    storage_bucket: str
    signed_url_ttl: int


def load_backend(raw: Mapping[str, Any]) -> BackendConfig:
    """Load backend config from the optional ``backend`` section."""
    section = get_section(raw, "backend", required=False)
    return BackendConfig(
        url_env=expect_str(get_optional_value(section, "url_env", "SUPABASE_URL"), "backend.url_env"),
        key_env=expect_str(get_optional_value(section, "key_env", "SUPABASE_ANON_KEY"), "backend.key_env"),
        email_env=expect_str(get_optional_value(section, "email_env", "CONFDESK_EMAIL"), "backend.email_env"),
        password_env=expect_str(
            get_optional_value(section, "password_env", "CONFDESK_PASSWORD"),
            "backend.password_env",
        ),
        storage_bucket=expect_str(
            get_optional_value(section, "storage_bucket", "articles"),
            "backend.storage_bucket",
        ),
        signed_url_ttl=expect_int(
            get_optional_value(section, "signed_url_ttl", 3600),
            "backend.signed_url_ttl",
        ),
    )


def check_backend(config: BackendConfig) -> None:
    """Validate backend domain constraints."""
    check_non_empty(config.url_env, "backend.url_env")
    check_non_empty(config.key_env, "backend.key_env")
    check_non_empty(config.storage_bucket, "backend.storage_bucket")
    check_positive(config.signed_url_ttl, "backend.signed_url_ttl")

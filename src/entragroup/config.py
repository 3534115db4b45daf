"""App registration settings for entragroup.

Each named context is one app registration in one tenant:

    current-context: contoso
    contexts:
      contoso:
        tenant-id: contoso.onmicrosoft.com
        client-id: 11111111-2222-3333-4444-555555555555
        client-secret: <secret value>

The file lives in the user config directory (XDG_CONFIG_HOME on Linux) and
is written readable by its owner only, since it holds client secrets.
Environment variables prefixed ENTRAGROUP_ take precedence over the file.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError

from entragroup.errors import PreconditionError

ENV_PREFIX = "ENTRAGROUP_"


class AppRegistration(BaseModel):
    """Client credentials of an Entra app registration."""

    tenant_id: str = Field(alias="tenant-id", description="Tenant ID or primary domain")
    client_id: str = Field(alias="client-id", description="Application (client) ID")
    client_secret: str = Field(alias="client-secret", description="Client secret value")

    model_config = {"populate_by_name": True}


class Config(BaseModel):
    current_context: str | None = Field(default=None, alias="current-context")
    contexts: dict[str, AppRegistration] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    def resolve(self, name: str | None = None) -> tuple[str, AppRegistration]:
        """The named context, or the current one when no name is given.

        Raises:
            PreconditionError: If no context is selected or it does not exist
        """
        name = name or self.current_context
        if not name:
            raise PreconditionError(
                "No app registration configured. Run 'entragroup config set-context', "
                f"or set {ENV_PREFIX}TENANT_ID, {ENV_PREFIX}CLIENT_ID and "
                f"{ENV_PREFIX}CLIENT_SECRET, or {ENV_PREFIX}BEARER_TOKEN."
            )
        registration = self.contexts.get(name)
        if registration is None:
            known = ", ".join(sorted(self.contexts)) or "none"
            raise PreconditionError(f"Context '{name}' not found (configured: {known})")
        return name, registration


def config_path() -> Path:
    return Path(user_config_dir("entragroup", appauthor=False)) / "config.yaml"


def load_config() -> Config:
    """Read the config file. A missing or empty file is an empty config.

    Raises:
        PreconditionError: If the file is not valid YAML or has the wrong shape
    """
    path = config_path()
    if not path.exists():
        return Config()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return Config.model_validate(data or {})
    except (yaml.YAMLError, ValidationError) as e:
        raise PreconditionError(f"Invalid config file {path}: {e}") from e


def save_config(config: Config) -> Path:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(by_alias=True, exclude_none=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    path.chmod(0o600)
    return path


def env(name: str) -> str | None:
    """ENTRAGROUP_<NAME> from the environment; empty values count as unset.

    Read by the client: TENANT_ID, CLIENT_ID, CLIENT_SECRET, BEARER_TOKEN.
    CONTEXT, OUTPUT and VERBOSE are read by the CLI options.
    """
    return os.environ.get(ENV_PREFIX + name.upper()) or None


def secret_hint(secret: str) -> str:
    """First three characters of a client secret, as the Entra portal shows them."""
    if len(secret) <= 6:
        return "*" * len(secret)
    return secret[:3] + "*" * 8

"""Configuration from environment variables.

Entry points call ``load_dotenv`` first, so a local ``.env`` works too.
"""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ValidationError

from talks_indexer.errors import ConfigurationError

# Environment variable -> Config field
ENV_VARS = {
    "MODE": "mode",
    "PORT": "port",
    "MORESLEEP_URL": "moresleep_url",
    "MORESLEEP_USER": "moresleep_user",
    "MORESLEEP_PASSWORD": "moresleep_password",
    "ALGOLIA_APP_ID": "algolia_app_id",
    "ALGOLIA_API_KEY": "algolia_api_key",
    "PRIVATE_INDEX": "private_index",
    "PUBLIC_INDEX": "public_index",
}


class Config(BaseModel):
    """Runtime configuration for the indexer service and CLI."""

    mode: Literal["development", "production"] = "development"
    port: int = 8080

    moresleep_url: str = "http://localhost:8082"
    moresleep_user: str = ""
    moresleep_password: str = ""

    algolia_app_id: Optional[str] = None
    algolia_api_key: Optional[str] = None

    private_index: str = "javazone_private"
    public_index: str = "javazone_public"

    @property
    def is_development(self) -> bool:
        return self.mode == "development"

    def log_safe(self) -> dict:
        """Settings worth logging at startup; credentials left out."""
        return {
            "mode": self.mode,
            "port": self.port,
            "moresleep_url": self.moresleep_url,
            "algolia_app_id": self.algolia_app_id,
            "private_index": self.private_index,
            "public_index": self.public_index,
        }


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a Config from the environment; unset variables keep defaults.

    Raises:
        ConfigurationError: if a variable has an invalid value (e.g. PORT=abc).
    """
    environ = os.environ if environ is None else environ
    values = {
        field: environ[var]
        for var, field in ENV_VARS.items()
        if environ.get(var, "") != ""
    }
    try:
        return Config(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

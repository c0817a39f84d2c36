"""Models for the TOML test configuration."""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import Field, model_validator

from url_tester.models.base import Model
from url_tester.probe import AppErrorRule

DEFAULT_APP_ERROR_KEY = "code"


class Environment(Model):
    """A named deployment target."""

    name: str = Field(default="", description="Environment key from the config")
    base_url: str = Field(..., alias="baseurl", description="Prefix for every path")


class TesterConfig(Model):
    """Complete configuration loaded from a TOML file."""

    __test__ = False

    environments: Mapping[str, Environment] = Field(
        ..., description="Environments keyed by name"
    )
    paths: Sequence[str] = Field(..., description="Paths appended to each base URL")
    app_error_key: str = Field(
        default=DEFAULT_APP_ERROR_KEY,
        alias="app_error_key_to_fail",
        description="JSON key inspected in 2xx bodies",
    )
    app_error_code: str | None = Field(
        default=None,
        alias="app_error_code_to_fail",
        description="Value of the key that marks an application error",
    )

    @model_validator(mode="before")
    @classmethod
    def name_environments(cls, data: Any) -> Any:
        """Copy each table key into the environment's name."""
        if not isinstance(data, Mapping):
            return data
        environments = data.get("environments")
        if not isinstance(environments, Mapping):
            return data
        named = {
            name: {**env, "name": name} if isinstance(env, Mapping) else env
            for name, env in environments.items()
        }
        return {**data, "environments": named}

    @property
    def app_error_rule(self) -> AppErrorRule | None:
        """Rule for application-level error detection, if enabled."""
        if self.app_error_code is None:
            return None
        return AppErrorRule(key=self.app_error_key, code=self.app_error_code)

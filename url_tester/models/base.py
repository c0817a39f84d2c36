"""Base model configuration for configuration data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen base model that accepts both field names and TOML aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

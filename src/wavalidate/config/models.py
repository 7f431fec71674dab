"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, wavalidate.toml only contains
overrides.  A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class SessionConfig(BaseModel):
    """[session] section."""

    model_config = {"frozen": True}

    auth_dir: str = "auth"
    reconnect_delay: float = 5.0
    # None keeps retrying forever on transient disconnects.
    max_reconnect_attempts: int | None = None
    # None waits for readiness without an upper bound.
    ready_timeout: float | None = None
    address_domain: str = "s.whatsapp.net"


class FormatConfig(BaseModel):
    """[format] section — regional number normalization."""

    model_config = {"frozen": True}

    policy: str = "trunk_prefix"
    trunk_digit: str = "0"
    trunk_replacement: str = "549"
    marker_after: str = "54911"
    mobile_marker: str = "15"

    def policy_options(self) -> dict[str, Any]:
        """Options handed to the policy factory (everything but the name)."""
        return self.model_dump(exclude={"policy"})


class InputConfig(BaseModel):
    """[input] section."""

    model_config = {"frozen": True}

    extensions: list[str] = Field(default_factory=lambda: [".txt"])
    encoding: str = "utf-8"

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    suffix: str = "_results"
    extension: str = ".csv"
    header: tuple[str, str] = ("phone", "validate")


class BatchConfig(BaseModel):
    """[batch] section."""

    model_config = {"frozen": True}

    # Lines without digits still produce an empty ``,false`` row unless set.
    skip_unformattable: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    local_dir: str = ".wavalidate/plugins"
    pairing: dict[str, Any] = Field(default_factory=lambda: {"enabled": True})


class WavConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    session: SessionConfig = Field(default_factory=SessionConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

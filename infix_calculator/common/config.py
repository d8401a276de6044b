"""Runtime configuration for the calculator."""
import os
from ipaddress import IPv4Address
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, field_validator

from infix_calculator.common.logger import normalize_level

# Default number of tokens accepted per line
MAX_TOKENS = 100
# Width of the machine integer every result is wrapped to
INT_BITS = 32

DEFAULT_PROMPT = ">>> "
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000

ENV_PREFIX = "INFIX_CALC_"


class CalculatorSettings(BaseModel):
    """
    Settings shared by the REPL, the session server and the client.

    Values can be overridden from the environment with the ``INFIX_CALC_``
    prefix (see :meth:`from_env`).
    """

    model_config = ConfigDict(frozen=True)

    max_tokens: Optional[int] = Field(default=MAX_TOKENS, ge=1, description="Token bound per line, None for unbounded")
    log_level: str = Field(default="WARNING", description="Level of the package logger")
    prompt: str = Field(default=DEFAULT_PROMPT, description="Interactive prompt")
    color: bool = Field(default=True, description="Render the prompt in color")
    host: IPvAnyAddress = Field(default=IPv4Address(DEFAULT_HOST), description="Session server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Session server TCP port")

    @field_validator("log_level")
    def log_level_must_be_known(cls, v: str) -> str:
        """Reject level names the logging module does not define."""
        return normalize_level(v)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CalculatorSettings":
        """
        Build settings from ``INFIX_CALC_*`` environment variables.

        :param environ: Mapping to read from, defaults to ``os.environ``

        :return: Validated settings
        :rtype: CalculatorSettings
        :raises pydantic.ValidationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for field in ("max_tokens", "log_level", "host", "port"):
            value = environ.get(ENV_PREFIX + field.upper())
            if value is not None:
                overrides[field] = value
        if overrides.get("max_tokens", "").lower() in ("none", "unbounded"):
            overrides["max_tokens"] = None
        return cls(**overrides)

    def with_overrides(self, **overrides) -> "CalculatorSettings":
        """
        Return a copy with ``overrides`` applied and validated again.

        :raises pydantic.ValidationError: If an override holds an invalid value
        """
        return self.model_validate({**self.model_dump(), **overrides})

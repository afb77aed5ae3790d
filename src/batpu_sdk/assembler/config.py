"""
Assembler Configuration
=======================

Options that change how a program is assembled. Configuration can come
from:
- Default values (defined here)
- Keyword arguments
- Environment variables (AssemblerConfig.from_env)

Environment variables (all optional):
    BATPU_DEFAULT_DEFINES: "1"/"0" - seed the I/O port defines
    BATPU_PRINT_INFO: "1"/"0" - log the utilization summary
    BATPU_TEXT_OUTPUT: "1"/"0" - write the text image instead of binary
    BATPU_TRAILING_SEMICOLON: ignore, warn or error
    BATPU_EMPTY_STATEMENT: ignore, warn or error
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional
import os

from batpu_sdk.cpu import BATPU2, Machine
from batpu_sdk.errors import ConfigurationError


_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


class StatementPolicy(Enum):
    """What to do with an empty statement."""
    IGNORE = "ignore"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def parse(cls, text: str) -> "StatementPolicy":
        try:
            return cls(text.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"invalid statement policy \"{text}\", expected one of {choices}"
            ) from None


def _parse_flag(name: str, text: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got \"{text}\"")


@dataclass
class AssemblerConfig:
    """
    Configuration for one Assembler.

    Attributes:
        default_defines: Seed the define table with the I/O port names
        print_info: Log the utilization summary after a successful assemble.
                    It goes to the "batpu_sdk.assembler.assembler" logger at
                    INFO, so it only shows once logging is configured; call
                    Assembler.get_info() to get the text directly
        text_output: write_output() produces the text image
        trailing_semicolon: Policy for the empty piece after a final ";"
        empty_statement: Policy for an empty statement between two ";"
        machine: Target machine limits
        max_errors: Stop a pass after this many errors (None for no limit)
    """

    default_defines: bool = True
    print_info: bool = False
    text_output: bool = False

    trailing_semicolon: StatementPolicy = StatementPolicy.WARN
    empty_statement: StatementPolicy = StatementPolicy.ERROR

    machine: Machine = field(default_factory=lambda: BATPU2)
    max_errors: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_errors is not None and self.max_errors < 1:
            raise ConfigurationError(
                f"max_errors must be at least 1, got {self.max_errors}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            AssemblerConfig with values from the environment

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        config = cls()

        if value := env.get("BATPU_DEFAULT_DEFINES"):
            config.default_defines = _parse_flag("BATPU_DEFAULT_DEFINES", value)

        if value := env.get("BATPU_PRINT_INFO"):
            config.print_info = _parse_flag("BATPU_PRINT_INFO", value)

        if value := env.get("BATPU_TEXT_OUTPUT"):
            config.text_output = _parse_flag("BATPU_TEXT_OUTPUT", value)

        if value := env.get("BATPU_TRAILING_SEMICOLON"):
            config.trailing_semicolon = StatementPolicy.parse(value)

        if value := env.get("BATPU_EMPTY_STATEMENT"):
            config.empty_statement = StatementPolicy.parse(value)

        return config

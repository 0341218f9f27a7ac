from __future__ import annotations

import logging
import subprocess
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .base import (
    AddressStrategy,
    NoAddressRecord,
    ResolutionStrategy,
    SystemLookupFailed,
    strategy_aliases,
)

logger = logging.getLogger(__name__)


class SystemStrategyConfig(BaseModel):
    """Brief: Typed configuration model for the system resolver strategy.

    Inputs:
      - command: argv prefix of the lookup facility; the host is appended.
      - timeout_ms: Optional timeout for the subprocess in milliseconds.

    Outputs:
      - SystemStrategyConfig instance with normalized field types.
    """

    command: List[str] = Field(
        default_factory=lambda: ["getent", "ahostsv4"], min_length=1
    )
    timeout_ms: Optional[int] = Field(default=None, ge=1)

    class Config:
        extra = "forbid"


def first_address_token(output: str) -> Optional[str]:
    """Brief: Return the first whitespace token of the first non-blank line.

    Inputs:
      - output: stdout text from ``getent ahostsv4``.

    Outputs:
      - str token or None when every line is blank.

    Example:
      >>> first_address_token("\\n93.184.216.34   STREAM example.com\\n")
      '93.184.216.34'
    """

    for line in output.splitlines():
        pieces = line.split()
        if pieces:
            return pieces[0]
    return None


@strategy_aliases("system", "isp")
class SystemResolverStrategy(AddressStrategy):
    """Resolve through the platform name service switch via getent."""

    strategy = ResolutionStrategy.SYSTEM
    failure_class = SystemLookupFailed

    @classmethod
    def get_config_model(cls):
        return SystemStrategyConfig

    def __init__(self, **config: Any) -> None:
        super().__init__(**config)
        self.command: List[str] = [
            str(part) for part in (self.config.get("command") or ["getent", "ahostsv4"])
        ]
        self.timeout = self._timeout_seconds(self.config.get("timeout_ms"))

    def lookup(self, host: str) -> str:
        # "--" keeps hosts with a leading dash from being parsed as options.
        argv = [*self.command, "--", host]
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise SystemLookupFailed(f"System resolver failed: {exc}") from exc

        if proc.returncode != 0:
            logger.debug(
                "%s exited with status %d for %s", argv[0], proc.returncode, host
            )
            raise SystemLookupFailed("System resolver could not resolve host.")

        address = first_address_token(proc.stdout or "")
        if address is None:
            raise NoAddressRecord("System resolver returned no IPv4 records.")
        return address

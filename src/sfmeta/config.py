from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_VERSION = "40.0"
DEFAULT_SFDX_BIN = "sfdx"
DEFAULT_TIMEOUT = 120.0


@dataclass
class SFMetaConfig:
    """Settings shared by the CLI and library callers."""

    # Org alias used when none is given on the command line
    alias: Optional[str] = None

    # Metadata API version, e.g. "40.0" (no leading "v")
    api_version: str = DEFAULT_API_VERSION

    # Executable that resolves alias credentials
    sfdx_bin: str = DEFAULT_SFDX_BIN

    # HTTP timeout for Metadata API calls, in seconds
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> SFMetaConfig:
        """Load configuration from environment variables."""
        timeout = os.getenv("SFMETA_TIMEOUT")
        try:
            timeout_value = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"SFMETA_TIMEOUT must be a number, got {timeout!r}") from None
        if timeout_value <= 0:
            raise ValueError(f"SFMETA_TIMEOUT must be a positive number, got {timeout!r}")

        return cls(
            alias=os.getenv("SFMETA_ALIAS") or None,
            api_version=os.getenv("SFMETA_API_VERSION") or DEFAULT_API_VERSION,
            sfdx_bin=os.getenv("SFMETA_SFDX_BIN") or DEFAULT_SFDX_BIN,
            timeout=timeout_value,
        )

#!/usr/bin/env python3
"""Client connection configuration

Remote management server settings. Nothing here is persisted; the values only
seed ``VMDeskClient`` when the application starts.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() in ("true", "1", "yes")


def _float(val: Optional[str], default: Optional[float]) -> Optional[float]:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ClientConfig:
    """Remote endpoint and transport settings"""

    # Management server base address, e.g. https://10.0.0.5:8443
    remote_url: Optional[str] = None
    # Bearer credential issued by the management server
    api_key: Optional[str] = field(default=None, repr=False)

    # None keeps the httpx default timeout
    timeout: Optional[float] = None
    verify_tls: bool = True

    # Address the local helper binds its terminal/VNC socket to
    local_stream_host: str = "127.0.0.1"

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def has_remote(self) -> bool:
        return bool(self.remote_url)

    @classmethod
    def from_env(cls) -> 'ClientConfig':
        """Load client config from environment"""
        return cls(
            remote_url=os.getenv("VMDESK_REMOTE_URL") or None,
            api_key=os.getenv("VMDESK_API_KEY") or None,
            timeout=_float(os.getenv("VMDESK_TIMEOUT"), None),
            verify_tls=_bool(os.getenv("VMDESK_VERIFY_TLS", "true")),
            local_stream_host=os.getenv("VMDESK_LOCAL_STREAM_HOST", "127.0.0.1"),
            logging=LoggingConfig.from_env(),
        )

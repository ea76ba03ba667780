"""
Custom exception hierarchy for ledgrid.

## Exception Hierarchy

```
LedGridError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── TransportError
│   ├── TransportNotConnectedError
│   └── FrameSizeError
└── DiscoveryError
    └── SubnetDetectionError
```

All custom exceptions inherit from `LedGridError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

Transient network failures are *not* exceptions: transports return a
`SendResult` describing the failure and the caller decides what to do.
"""

from .base import LedGridError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .discovery import DiscoveryError, SubnetDetectionError
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    wrap_pydantic_error,
)
from .transport import FrameSizeError, TransportError, TransportNotConnectedError

__all__ = [
    # Base
    "LedGridError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Discovery
    "DiscoveryError",
    "SubnetDetectionError",
    # Transport
    "FrameSizeError",
    "TransportError",
    "TransportNotConnectedError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "wrap_pydantic_error",
]

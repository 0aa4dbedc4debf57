"""
Logfire configuration and initialization.

Logfire provides structured logging, distributed tracing, and real-time
observability for the generation pipeline and the renderer.

Environment Variables:
    LOGFIRE_TOKEN: Logfire project token (spans stay local without it)
    ENVIRONMENT: deployment environment (development, staging, production)
"""
import os
from typing import Optional

import logfire


class LogfireConfig:
    """
    Logfire configuration singleton.

    Ensures Logfire is initialized only once. Without a token, spans are
    still created but nothing is exported.
    """

    _initialized = False

    @classmethod
    def initialize(cls, token: Optional[str] = None, environment: Optional[str] = None) -> None:
        """
        Initialize Logfire and pydantic-ai instrumentation.

        Args:
            token: Logfire project token (or set LOGFIRE_TOKEN env var)
            environment: Deployment environment (or set ENVIRONMENT env var)
        """
        if cls._initialized:
            return

        token = token or os.getenv("LOGFIRE_TOKEN") or None

        logfire.configure(
            token=token,
            service_name="flow-screening",
            environment=environment or os.getenv("ENVIRONMENT", "development"),
            send_to_logfire="if-token-present",
        )
        logfire.instrument_pydantic_ai()

        cls._initialized = True

        if not token:
            logfire.warning("LOGFIRE_TOKEN not set; spans are not exported")

    @classmethod
    def is_initialized(cls) -> bool:
        """
        Check if Logfire has been initialized.

        Returns:
            True if initialized, False otherwise
        """
        return cls._initialized

"""
CLI Serve Command

Run the HTTP API with uvicorn.

Usage:
    pitchpool serve [--host 0.0.0.0] [--port 8000] [--reload]
"""

from __future__ import annotations

import logging
from argparse import Namespace


logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0


def serve_cmd(args: Namespace) -> int:
    """Execute the serve command."""
    import uvicorn

    api = args.runtime_config.api
    host = args.host or api.host
    port = args.port or api.port

    logger.info(f"Starting pitchpool API on {host}:{port}")
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=args.runtime_config.log_level.lower(),
    )
    return EXIT_SUCCESS

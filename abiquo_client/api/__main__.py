"""
abiquo_client.api - Run as module

Usage: python -m abiquo_client.api
"""

import logging
import os

import uvicorn


def main():
    """Run the API gateway server."""
    host = os.environ.get("ABIQUO_GATEWAY_HOST", "0.0.0.0")
    port = int(os.environ.get("ABIQUO_GATEWAY_PORT", "5050"))
    reload = os.environ.get("ABIQUO_GATEWAY_RELOAD", "false").lower() == "true"
    log_level = os.environ.get("LOG_LEVEL", "info")

    logging.basicConfig(level=log_level.upper())
    logging.getLogger("abiquo_client").info("Starting Abiquo Gateway on %s:%s", host, port)

    uvicorn.run(
        "abiquo_client.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()

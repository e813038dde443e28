"""Entry point that serves the Pet Registry API with uvicorn.

Intended to be executed from the project root, for example inside a
container where you only specify a single Python file to run.  Host and
port are read from ``API_HOST`` and ``API_PORT`` (defaults ``0.0.0.0``
and ``8000``); everything else comes from the variables documented in
``pet_registry_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from pet_registry_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Pet registry stopped")

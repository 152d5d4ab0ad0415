from __future__ import annotations

import uvicorn

from crystal_peak.config import app_config
from crystal_peak.logging import get_logger, setup_logging


def main() -> None:
    setup_logging(app_config.logging)
    get_logger(__name__).info("server.start", host=app_config.server.host, port=app_config.server.port)
    uvicorn.run(
        "crystal_peak.api:app",
        host=app_config.server.host,
        port=app_config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()

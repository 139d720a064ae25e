"""Run the proxy with uvicorn: ``python -m carimbo_cdn`` or ``carimbo-cdn``.

Listens on ``HOST:PORT`` from the environment. If the port cannot be
bound, uvicorn logs the error and the process exits non-zero.
"""

import uvicorn

from carimbo_cdn.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "carimbo_cdn.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()

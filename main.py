"""Run the parking engine API under uvicorn.

    python main.py

Equivalent to ``uvicorn app:app``. Engine state lives in memory, so the
server runs without auto-reload.
"""

from __future__ import annotations

import uvicorn

from backend.utils.config import get_settings


HOST = "127.0.0.1"
PORT = 8000


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "app:app",
        host=HOST,
        port=PORT,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

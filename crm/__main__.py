"""Run the API with uvicorn: ``python -m crm``."""
from __future__ import annotations

import logging

import uvicorn

from crm.app import create_app
from crm.core.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()

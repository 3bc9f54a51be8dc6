"""CLI entrypoint to run the PickLab FastAPI server."""

from __future__ import annotations

import logging
import os

import uvicorn

from picklab.db.database import init_db


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    init_db()
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("picklab.api.server:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()

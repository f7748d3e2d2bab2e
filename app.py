#!/usr/bin/env python3

import logging
import os

import uvicorn

from backend.app.core.config import settings

if __name__ == '__main__':
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT)
    uvicorn.run(
        "backend.app.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8081")),
        log_config=None,
    )

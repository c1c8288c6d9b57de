"""
Entry point — start the FocusFlow timer service.

Usage:
    python -m focusflow.main
    uvicorn focusflow.api.app:app --host 127.0.0.1 --port 8765
"""

import uvicorn
from .config import config


def main():
    uvicorn.run(
        "focusflow.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()

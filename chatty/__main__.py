"""
Run the Chatty API with uvicorn: ``python -m chatty``
"""

import uvicorn

from chatty.config.settings import settings


def main():
    uvicorn.run(
        "chatty.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()

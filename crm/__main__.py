"""Run the API server: python -m crm"""

import uvicorn

from crm.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "crm.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

"""Run the service with uvicorn: ``python -m mediavault``."""

import uvicorn

from mediavault.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "mediavault.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()

import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logging.info("Starting Forecast Portal")
    uvicorn.run(
        "forecast_portal.web.app:create_app",
        factory=True,
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    main()

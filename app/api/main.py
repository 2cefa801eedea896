"""
Server entrypoint (`ai-gateway` console script).

Runs `app.api.http_api:app` under uvicorn. `HOST` and `PORT` come from the
environment (defaults `0.0.0.0:8080`).
"""

import os

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    log_level = "debug" if os.getenv("DEBUG") == "true" else "info"

    uvicorn.run("app.api.http_api:app", host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()

"""Run the vote aggregator API with uvicorn.

Environment:
    HOST: Bind address (default 0.0.0.0)
    PORT: Bind port (default 8000)
"""

import os

import uvicorn

from vote_aggregator.api.main import create_app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()

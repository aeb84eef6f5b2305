"""Run the tracker API with uvicorn: ``python -m planetracker``."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "planetracker.main:app",
        host=os.getenv("PLANETRACKER_HOST", "127.0.0.1"),
        port=int(os.getenv("PLANETRACKER_PORT", "8000")),
    )


if __name__ == "__main__":
    main()

"""Run the API with uvicorn: ``python -m demo_bank``"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "demo_bank.api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    main()

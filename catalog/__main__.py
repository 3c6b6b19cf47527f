"""Run the catalogue API with uvicorn: ``python -m catalog``."""
import uvicorn

from catalog import config


def main() -> None:
    uvicorn.run("catalog.endpoints:app", host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()

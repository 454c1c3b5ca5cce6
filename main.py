import asyncio

from data.app_factory import run_gateway


if __name__ == "__main__":
    asyncio.run(run_gateway())

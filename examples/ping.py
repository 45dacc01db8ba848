import asyncio

from rich import print

from udping import AsyncClient, run_sequence


async def main():
    async with AsyncClient() as client:
        result = await run_sequence(client, "127.0.0.1:9000", count=3)
        for attempt in result.attempts:
            print(attempt)
        print(result)


if __name__ == "__main__":
    asyncio.run(main())

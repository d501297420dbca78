import asyncio
import time
from concurrent.futures import ThreadPoolExecutor

import tako
from tako.logging import setup_logging

USERS = {n: f"user-{n}" for n in range(100)}


def fetch_users(ids: list[int]) -> list[object]:
    """Pretend bulk lookup: one round trip per batch, errors returned per id."""
    print(f"fetching batch of {len(ids)}: {ids[:5]}...")
    time.sleep(0.05)
    return [USERS.get(i, KeyError(i)) for i in ids]


def run_threads(loader: tako.Loader) -> None:
    """Load ids from many threads; they share a handful of batches."""
    with ThreadPoolExecutor(max_workers=16) as executor:
        containers = list(executor.map(loader.load_one, range(40)))
    print([c.result() for c in containers][:5])
    print(loader.load_one(404).result())


async def run_async(loader: tako.Loader) -> None:
    """Await containers from asyncio code."""
    first, many = await asyncio.gather(loader.load_one(50), loader.load_many([51, 52, 50]))
    print(first, many)


if __name__ == "__main__":
    setup_logging()
    with tako.start(fetch_users, max_batch_size=25, max_batch_time_ms=10, name="users") as loader:
        run_threads(loader)
        asyncio.run(run_async(loader))

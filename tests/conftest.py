"""
Shared fixtures.
"""
import asyncio

import pytest
import pytest_asyncio

BASE_URL = "https://example.com"


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest_asyncio.fixture
async def silent_server():
    """Local TCP server that accepts a request and never answers it."""
    release = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.read(65536)
            await release.wait()
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    yield f"http://{host}:{port}/slow"

    release.set()
    server.close()
    await server.wait_closed()

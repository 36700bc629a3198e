"""
Example: JSON request bodies

Non-string bodies are serialized with json.dumps and, unless the caller set
one, sent with Content-Type: application/json. JSON responses come back
already decoded on `response.data`.
"""

import asyncio
from curlhttp import AsyncClient, Client, HTTPStatusError


def sync_example():
    client = Client(timeout=30)
    response = client.post(
        "https://httpbin.org/post",
        data={"name": "curlhttp", "features": ["streaming", "multipart"]},
    )
    print(f"Status: {response.status} {response.status_text}")
    print(f"Echoed JSON: {response.data['json']}")

    try:
        client.get("https://httpbin.org/status/418")
    except HTTPStatusError as exc:
        print(f"\nFailed as expected: {exc} ({exc.response.data!r:.60})")


async def async_example():
    client = AsyncClient(timeout=30)
    response = await client.put(
        "https://httpbin.org/put",
        headers={"Content-Type": "application/json"},
        data={"action": "update", "id": 123},
    )
    print(f"\nAsync Status: {response.status}")
    print(f"Echoed JSON: {response.data['json']}")


if __name__ == "__main__":
    print("=== Sync Example ===")
    sync_example()

    print("\n=== Async Example ===")
    asyncio.run(async_example())

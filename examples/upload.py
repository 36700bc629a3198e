"""
Example: streaming a file upload as multipart/form-data

Any open file in the data mapping switches the request to multipart mode.
The file is read chunk by chunk straight into curl's input.
"""

import asyncio
import sys

from curlhttp import AsyncClient, Client, FileField


def main(path: str) -> None:
    with open(path, "rb") as fh:
        r = Client().post(
            "https://httpbin.org/post",
            data={"description": "sync upload", "meta": {"tags": ["a", "b"]}, "file": fh},
        )
    print("Client upload status:", r.status, "files:", list(r.data["files"]))


async def amain(path: str) -> None:
    with open(path, "rb") as fh:
        r = await AsyncClient(chunk_size=16 * 1024).post(
            "https://httpbin.org/post",
            data={"upload": FileField(fh, filename="renamed.bin")},
        )
    print("AsyncClient upload status:", r.status, "files:", list(r.data["files"]))


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else __file__
    main(target)
    asyncio.run(amain(target))

"""Command-line access to the storage facade.

The facade is configured from the environment (see ``Settings``), so the same
command works against local disk, S3/MinIO or GCS.

    file-storage put avatars/42.png ./42.png
    file-storage url avatars/42.png
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .bootstrap import get_storage_info
from .bootstrap import init_storage
from .exceptions import NotFoundError
from .exceptions import StorageError
from .storage import Storage


def build_parser():
    parser = argparse.ArgumentParser(prog="file-storage", description="File storage facade CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    put = sub.add_parser("put", help="Upload a file (or stdin with '-')")
    put.add_argument("key")
    put.add_argument("source", help="Local file path, or '-' for stdin")
    put.add_argument("--content-type", default=None, help="MIME type (guessed from the key by default)")

    get = sub.add_parser("get", help="Download an object")
    get.add_argument("key")
    get.add_argument("-o", "--output", default=None, help="Write to this file instead of stdout")

    for name, help_text in (
        ("delete", "Delete an object (absent keys are ignored)"),
        ("exists", "Exit 0 if the object exists, 1 otherwise"),
        ("url", "Print the public URL of a key"),
        ("stat", "Print object metadata as JSON"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("key")

    ls = sub.add_parser("ls", help="List keys under a prefix")
    ls.add_argument("prefix", nargs="?", default="")

    sub.add_parser("info", help="Show the active storage configuration")
    return parser


async def run_command(storage: Storage, args) -> int:
    """Execute one parsed command against a configured facade."""
    if args.command == "put":
        if args.source == "-":
            await storage.put(args.key, sys.stdin.buffer.read(), args.content_type)
        else:
            await storage.put_file(args.key, Path(args.source), args.content_type)
        print(storage.public_url(args.key))
    elif args.command == "get":
        data = await storage.get(args.key)
        if args.output:
            Path(args.output).write_bytes(data)
        else:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
    elif args.command == "delete":
        await storage.delete(args.key)
    elif args.command == "exists":
        found = await storage.exists(args.key)
        print("yes" if found else "no")
        return 0 if found else 1
    elif args.command == "url":
        print(storage.public_url(args.key))
    elif args.command == "stat":
        info = await storage.stat(args.key)
        if info is None:
            raise NotFoundError(args.key)
        print(
            json.dumps(
                {
                    "key": info.key,
                    "size": info.size,
                    "last_modified": info.last_modified.isoformat(),
                    "content_type": info.content_type,
                }
            )
        )
    elif args.command == "ls":
        for key in await storage.list_keys(args.prefix):
            print(key)
    elif args.command == "info":
        print(json.dumps(get_storage_info(storage), indent=2))
    return 0


def main(argv=None, storage=None):
    """Run the CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        storage = init_storage(storage=storage or Storage())
        return asyncio.run(run_command(storage, args))
    except StorageError as e:
        print(f"error [{e.error_code}]: {e.message}", file=sys.stderr)
        return 2 if isinstance(e, NotFoundError) else 1


if __name__ == "__main__":
    sys.exit(main())

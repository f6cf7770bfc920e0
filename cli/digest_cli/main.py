"""Main entry point for the Digest CLI."""
from __future__ import annotations

import asyncio
import logging
import sys

from digest_cli import __version__
from digest_cli.client import ApiClient
from digest_cli.config import Config
from digest_cli.controller import DraggableLocation, DragController, DropKind, DropResult
from digest_cli.errors import ApiError
from digest_cli.mutations import BlockMutationClient
from digest_cli.notify import ConsoleNotifier
from engine.kernel.types import SOURCE_POOL_ID

BLOCK_LIST_ID = "digest"

COMMANDS = ("use", "show", "bookmarks", "add", "move", "remove")


def print_help():
    """Print help message."""
    print(f"""
Digest CLI v{__version__}

Usage:
  digest [options] <command> [args]

Commands:
  use TEAM_ID [DIGEST_ID]     Remember the team (and digest) for this API URL
  show                        List the digest's blocks in order
  bookmarks                   List the team's bookmark pool
  add BOOKMARK_ID POSITION    Drop a bookmark into the digest at POSITION
  move BLOCK_ID POSITION      Move a block to POSITION
  remove BLOCK_ID             Remove a block

Options:
  --api-url URL     Override API endpoint (default: http://localhost:8000)
  --team ID         Team to act on (default: from config)
  --digest ID       Digest to act on (default: from config)
  --search TEXT     bookmarks: filter by title, description or url
  --unused          bookmarks: only those not in any digest
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  DIGEST_API_URL    Override API endpoint (same as --api-url)
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None
        params: list[str] (positional arguments after the command)
        api_url, team_id, digest_id, search: str | None
        unused, show_help, show_version: bool
    """
    result = {
        "command": None,
        "params": [],
        "api_url": None,
        "team_id": None,
        "digest_id": None,
        "search": None,
        "unused": False,
        "show_help": False,
        "show_version": False,
    }
    valued = {"--api-url": "api_url", "--team": "team_id", "--digest": "digest_id", "--search": "search"}

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in valued:
            if i + 1 >= len(args):
                print(f"Error: {arg} requires a value")
                sys.exit(1)
            result[valued[arg]] = args[i + 1]
            i += 1
        elif arg == "--unused":
            result["unused"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-") and not arg.lstrip("-").isdigit():
            print(f"Unknown option: {arg}")
            print("Run 'digest --help' for usage.")
            sys.exit(1)
        elif result["command"] is None:
            if arg not in COMMANDS:
                print(f"Unknown command: {arg}")
                print("Run 'digest --help' for usage.")
                sys.exit(1)
            result["command"] = arg
        else:
            result["params"].append(arg)

        i += 1

    return result


def _position(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        print(f"Error: position must be a number, got {value!r}")
        sys.exit(1)


def print_blocks(blocks: list[dict]):
    if not blocks:
        print("  (no blocks)")
        return
    for block in blocks:
        if block.get("bookmark"):
            label = block["bookmark"].get("title") or block["bookmark"]["url"]
        else:
            label = block.get("title") or block.get("text") or ""
        print(f"  {block['order']:>3}  {block['type']:<8}  {label}  [{block['id']}]")


async def run_command(args: dict, config: Config, client: ApiClient) -> bool:
    """Run one command. Returns True on success."""
    command = args["command"]
    params = args["params"]
    team_id = args["team_id"] or config.team_id
    digest_id = args["digest_id"] or config.default_digest_id
    notifier = ConsoleNotifier()

    if command == "use":
        if not params:
            print("Usage: digest use TEAM_ID [DIGEST_ID]")
            return False
        config.team_id = params[0]
        config.default_digest_id = params[1] if len(params) > 1 else None
        print(f"Using team {config.team_id} on {config.api_url}")
        return True

    if not team_id:
        print("No team selected. Run 'digest use TEAM_ID' or pass --team.")
        return False

    if command == "bookmarks":
        page = await client.list_bookmarks(team_id, search=args["search"], only_not_in_digest=args["unused"])
        for bm in page["bookmarks"]:
            print(f"  {bm['id']}  {bm.get('title') or bm['url']}")
        print(f"  {len(page['bookmarks'])} of {page['bookmarks_count']}")
        return True

    if not digest_id:
        print("No digest selected. Run 'digest use TEAM_ID DIGEST_ID' or pass --digest.")
        return False

    mutations = BlockMutationClient(client, team_id, digest_id)
    digest = await mutations.load()

    if command == "show":
        print(f"{digest['title']} (version {digest['version']})")
        print_blocks(mutations.blocks)
        return True

    if command == "remove":
        if len(params) != 1:
            print("Usage: digest remove BLOCK_ID")
            return False
        try:
            await mutations.remove_block(params[0])
        except ApiError as e:
            notifier.error(e.message)
            return False
        notifier.success("Block removed")
        print_blocks(mutations.blocks)
        return True

    # add and move go through the drag controller, as a drop would
    if len(params) != 2:
        print(f"Usage: digest {command} {'BOOKMARK_ID' if command == 'add' else 'BLOCK_ID'} POSITION")
        return False
    draggable_id, position = params[0], _position(params[1])

    if command == "add":
        source = DraggableLocation(SOURCE_POOL_ID, 0)
    else:
        ids = [b["id"] for b in mutations.blocks]
        source = DraggableLocation(BLOCK_LIST_ID, ids.index(draggable_id) if draggable_id in ids else 0)

    controller = DragController(mutations, notifier)
    controller.drag_start()
    kind = await controller.drag_end(
        DropResult(draggable_id, source, DraggableLocation(BLOCK_LIST_ID, position))
    )
    if controller.last_error is not None or kind == DropKind.NOOP:
        return False
    notifier.success("Block added" if kind == DropKind.INSERT else "Block moved")
    print_blocks(mutations.blocks)
    return True


async def _main(args: dict, config: Config) -> bool:
    async with ApiClient(config.api_url) as client:
        try:
            return await run_command(args, config, client)
        except ApiError as e:
            print(f"Error: {e.message}")
            return False


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    if args["show_version"]:
        print(f"digest-cli {__version__}")
        return

    if args["show_help"] or args["command"] is None:
        print_help()
        return

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    config = Config(api_url_override=args["api_url"])
    success = asyncio.run(_main(args, config))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()

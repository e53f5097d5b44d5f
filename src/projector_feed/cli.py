"""Command-line interface for projector-feed.

Commands operate on projectors stored in Message DB: create projectors,
project and remove elements, toggle the current list of speakers, show a
projector with its current agenda item, and watch that item change live.
Agenda items are resolved from a content JSON file (``--content``).
"""

import argparse
import asyncio
import json
import sys

from projector_feed.config import Config, load_config
from projector_feed.content import ContentRepository, load_content_file
from projector_feed.current_item import get_current_agenda_item
from projector_feed.directory.messagedb import MessageDBProjectorDirectory
from projector_feed.errors import ProjectorFeedError
from projector_feed.logging_setup import configure_logging
from projector_feed.models.agenda import Item
from projector_feed.models.projector import ElementDescriptor, ProjectorElement
from projector_feed.models.summary import AgendaItemSummary, ProjectorSummary
from projector_feed.service import CurrentListOfSpeakersSlideService
from projector_feed.slides.manager import SlideManager
from projector_feed.store import MessageDBClient, OptimisticConcurrencyError


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured argument parser with all subcommands
    """
    parser = argparse.ArgumentParser(
        prog="projector-feed",
        description="Live current agenda item per projector, backed by Message DB",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file (.env format)",
        metavar="FILE",
    )
    parser.add_argument(
        "--content",
        type=str,
        help="Path to content JSON file used to resolve agenda items",
        metavar="FILE",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_cmd_parser = subparsers.add_parser("create", help="Create a projector")
    create_cmd_parser.add_argument("projector_id", type=int, help="Projector id")
    create_cmd_parser.add_argument("--name", type=str, default="", help="Projector name")

    clear_parser = subparsers.add_parser("clear", help="Remove the current element of a projector")
    clear_parser.add_argument("projector_id", type=int, help="Projector id")

    show_parser = subparsers.add_parser("show", help="Show a projector and its current item")
    show_parser.add_argument("projector_id", type=int, help="Projector id")
    show_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    toggle_parser = subparsers.add_parser(
        "toggle", help="Toggle the current list of speakers on a projector"
    )
    toggle_parser.add_argument("projector_id", type=int, help="Projector id")
    toggle_parser.add_argument(
        "--overlay", action="store_true", help="Toggle the overlay instead of the slide"
    )

    project_parser = subparsers.add_parser("project", help="Project an element")
    project_parser.add_argument("projector_id", type=int, help="Projector id")
    project_parser.add_argument("name", type=str, help="Slide name, e.g. topics/topic")
    project_parser.add_argument("--id", type=int, dest="content_id", help="Content id")
    project_parser.add_argument("--stable", action="store_true", help="Project as stable element")

    remove_parser = subparsers.add_parser("remove", help="Remove an element")
    remove_parser.add_argument("projector_id", type=int, help="Projector id")
    remove_parser.add_argument("name", type=str, help="Slide name, e.g. topics/topic")
    remove_parser.add_argument("--id", type=int, dest="content_id", help="Content id")

    watch_parser = subparsers.add_parser("watch", help="Print the current item on every change")
    watch_parser.add_argument("projector_id", type=int, help="Projector id")

    return parser


def _load_content(args: argparse.Namespace) -> ContentRepository:
    if args.content:
        return load_content_file(args.content)
    return ContentRepository()


def _element_descriptor(args: argparse.Namespace, stable: bool = False) -> ElementDescriptor:
    """Build the descriptor of a slide given on the command line.

    Raises:
        MalformedElementError: If the slide is unknown or needs an --id that is missing
    """
    options = {"id": args.content_id} if args.content_id is not None else {}
    element = ProjectorElement(name=args.name, stable=stable, options=options)
    return SlideManager().get_identifiable_element(element)


def _format_item(item: Item | None) -> str:
    if item is None:
        return "-"
    return f"{item.get_title()} (item {item.id})"


def cmd_create(args: argparse.Namespace, directory: MessageDBProjectorDirectory) -> int:
    directory.create_projector(args.projector_id, name=args.name)
    print(f"Created projector {args.projector_id}")
    return 0


def cmd_clear(args: argparse.Namespace, directory: MessageDBProjectorDirectory) -> int:
    directory.clear_projector(args.projector_id)
    print(f"Cleared projector {args.projector_id}")
    return 0


def cmd_show(
    args: argparse.Namespace,
    directory: MessageDBProjectorDirectory,
    content: ContentRepository,
) -> int:
    projector = directory.get_projector(args.projector_id)
    item = get_current_agenda_item(projector, SlideManager(), content)

    if args.format == "json":
        print(ProjectorSummary.from_projector(projector, item).model_dump_json(indent=2))
        return 0

    print(f"Projector {projector.id}" + (f" ({projector.name})" if projector.name else ""))
    print("=" * 60)
    for element in projector.elements:
        marker = "stable" if element.stable else "current"
        extra = json.dumps(dict(element.options)) if element.options else ""
        print(f"  [{marker:<7}] {element.name} {extra}".rstrip())
    print("=" * 60)
    print(f"Current item: {_format_item(item)}")
    return 0


def cmd_toggle(
    args: argparse.Namespace,
    directory: MessageDBProjectorDirectory,
    content: ContentRepository,
) -> int:
    service = CurrentListOfSpeakersSlideService(directory, content)
    projector = directory.get_projector(args.projector_id)
    asyncio.run(service.toggle_on(projector, args.overlay))
    shown = asyncio.run(service.is_projected_on(projector, args.overlay))
    variant = "overlay" if args.overlay else "slide"
    state = "on" if shown else "off"
    print(f"Current list of speakers {variant} is now {state} on projector {projector.id}")
    return 0


def cmd_project(args: argparse.Namespace, directory: MessageDBProjectorDirectory) -> int:
    descriptor = _element_descriptor(args, stable=args.stable)
    asyncio.run(directory.project_on(args.projector_id, descriptor))
    print(f"Projected {args.name} on projector {args.projector_id}")
    return 0


def cmd_remove(args: argparse.Namespace, directory: MessageDBProjectorDirectory) -> int:
    descriptor = _element_descriptor(args)
    asyncio.run(directory.remove_from(args.projector_id, descriptor))
    print(f"Removed {args.name} from projector {args.projector_id}")
    return 0


def cmd_watch(
    args: argparse.Namespace,
    directory: MessageDBProjectorDirectory,
    content: ContentRepository,
) -> int:
    # Read the feed position before the snapshot so no change falls in between
    position = directory.next_position()
    service = CurrentListOfSpeakersSlideService(directory, content)
    channel = service.get_agenda_item_channel(directory.get_projector(args.projector_id))

    def print_item(item: Item | None) -> None:
        payload = AgendaItemSummary.from_item(item).model_dump() if item is not None else None
        print(json.dumps({"projector_id": args.projector_id, "current_item": payload}))
        sys.stdout.flush()

    subscription = channel.subscribe(print_item)
    subscriber = directory.watch(position=position)
    try:
        subscriber.start()
    except KeyboardInterrupt:
        subscriber.stop()
    finally:
        subscription.unsubscribe()
        service.close()
    return 0


def run_command(args: argparse.Namespace, config: Config) -> int:
    """Run a parsed command against Message DB.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        content = _load_content(args)
        with MessageDBClient(config.message_db) as client:
            directory = MessageDBProjectorDirectory(client, config.directory)
            if args.command == "create":
                return cmd_create(args, directory)
            elif args.command == "clear":
                return cmd_clear(args, directory)
            elif args.command == "show":
                return cmd_show(args, directory, content)
            elif args.command == "toggle":
                return cmd_toggle(args, directory, content)
            elif args.command == "project":
                return cmd_project(args, directory)
            elif args.command == "remove":
                return cmd_remove(args, directory)
            elif args.command == "watch":
                return cmd_watch(args, directory, content)
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1
    except (ProjectorFeedError, OptimisticConcurrencyError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging)
    return run_command(args, config)


if __name__ == "__main__":
    sys.exit(main())

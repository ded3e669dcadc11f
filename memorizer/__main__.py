"""CLI interface for the sentence memorizer.

Usage:
    python -m memorizer study                  Practise translating sentences
    python -m memorizer add "english" "korean" Add a sentence pair
    python -m memorizer list                   List sentence pairs
    python -m memorizer delete ID              Delete a sentence pair
    python -m memorizer import FILE            Import pairs from JSON or CSV
    python -m memorizer stats                  Show your statistics
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from backend.database import open_store
from backend.srs.errors import MemorizerError
from backend.srs.pairs import create_pair, delete_pair, import_pairs, list_pairs, read_pair_entries
from backend.srs.stats import compute_stats
from backend.srs.store import MemorizationStore
from backend.srs.study import next_pair, submit_answer


async def cmd_study(store: MemorizationStore, args: argparse.Namespace) -> None:
    """Run an interactive study loop."""
    print("\n  Study Session")
    print("  Translate each Korean sentence into English.")
    print("  Type 'm' to mark the sentence memorized, 'q' to quit\n")

    correct = 0
    reviewed = 0

    while args.max_cards is None or reviewed < args.max_cards:
        pair = await next_pair(store)
        if pair is None:
            print("  No sentences yet. Add some with 'add'.")
            break

        print(f"  [{reviewed + 1}] {pair.korean}")
        start_time = time.time()
        response = input("  Your answer: ").strip()
        time_ms = int((time.time() - start_time) * 1000)

        if response.lower() == "q":
            print("\n  Session ended.")
            break
        if response.lower() == "m":
            await store.mark_memorized(pair.id)
            print("  Marked as memorized.\n")
            continue

        result = await submit_answer(store, pair.id, response, time_ms)
        reviewed += 1
        if result.assessment.is_correct:
            correct += 1
            print("  Correct!")
        else:
            print(f"  {result.assessment.feedback}")
        print(f"  Difficulty now {result.record.difficulty_score:.2f}\n")

    accuracy = correct / reviewed * 100 if reviewed else 0
    print(f"\n  Reviewed: {reviewed}  Correct: {correct}  Accuracy: {accuracy:.0f}%\n")


async def cmd_add(store: MemorizationStore, args: argparse.Namespace) -> None:
    """Add a new sentence pair."""
    pair = await create_pair(store, args.english, args.korean)
    print(f"  Added sentence pair {pair.id}.")


async def cmd_list(store: MemorizationStore, args: argparse.Namespace) -> None:
    """List sentence pairs with their progress."""
    pairs = await list_pairs(store)
    if not pairs:
        print("  No sentence pairs.")
        return
    progress = {pair.id: record for pair, record in await store.load_candidates()}
    for pair in pairs:
        record = progress.get(pair.id)
        if record is None:
            status = "new"
        elif record.is_memorized:
            status = "memorized"
        else:
            status = f"{record.correct_attempts}/{record.attempts} correct"
        print(f"  {pair.id:>4}  {pair.english}  |  {pair.korean}  ({status})")


async def cmd_delete(store: MemorizationStore, args: argparse.Namespace) -> None:
    """Delete a sentence pair and its progress."""
    await delete_pair(store, args.pair_id)
    print(f"  Deleted sentence pair {args.pair_id}.")


async def cmd_import(store: MemorizationStore, args: argparse.Namespace) -> None:
    """Import sentence pairs from a JSON or CSV file."""
    entries = read_pair_entries(args.path)
    loaded = await import_pairs(store, entries)
    print(f"  Imported {loaded} of {len(entries)} sentence pairs.")


async def cmd_stats(store: MemorizationStore, args: argparse.Namespace) -> None:
    """Show study statistics."""
    stats = await compute_stats(store)
    accuracy = f"{stats.average_accuracy * 100:.0f}%" if stats.average_accuracy is not None else "-"
    last = stats.last_study_date.strftime("%Y-%m-%d %H:%M") if stats.last_study_date else "never"

    print("\n  Study Statistics")
    print(f"  {'Sentences:':<20} {stats.total_sentences}")
    print(f"  {'Memorized:':<20} {stats.memorized_sentences}")
    print(f"  {'Attempts:':<20} {stats.total_attempts}")
    print(f"  {'Average accuracy:':<20} {accuracy}")
    print(f"  {'Study time:':<20} {stats.total_study_time_seconds}s")
    print(f"  {'Streak:':<20} {stats.streak_days} days")
    print(f"  {'Last studied:':<20} {last}")
    print()


COMMANDS = {
    "study": cmd_study,
    "add": cmd_add,
    "list": cmd_list,
    "delete": cmd_delete,
    "import": cmd_import,
    "stats": cmd_stats,
}


async def run(args: argparse.Namespace) -> None:
    async with open_store(args.database_url) as store:
        await COMMANDS[args.command](store, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memorizer",
        description="English/Korean sentence memorizer",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--database-url", default=None, help="Override the configured database URL")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    study_parser = subparsers.add_parser("study", help="Practise translating sentences")
    study_parser.add_argument("--max-cards", type=int, default=None, help="Stop after N answers")

    add_parser = subparsers.add_parser("add", help="Add a sentence pair")
    add_parser.add_argument("english", help="English sentence")
    add_parser.add_argument("korean", help="Korean sentence")

    subparsers.add_parser("list", help="List sentence pairs")

    delete_parser = subparsers.add_parser("delete", help="Delete a sentence pair")
    delete_parser.add_argument("pair_id", type=int, help="Sentence pair ID")

    import_parser = subparsers.add_parser("import", help="Import sentence pairs from a file")
    import_parser.add_argument("path", type=Path, help="JSON or CSV file of sentence pairs")

    subparsers.add_parser("stats", help="Show your statistics")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the memorizer CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return 0

    try:
        asyncio.run(run(args))
    except MemorizerError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

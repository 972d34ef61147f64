"""Console entry point for the vocabulary drill.

Usage:
    python -m lexdrill --lessons
    python -m lexdrill --lesson 3
    python -m lexdrill --practice --category noun --category verb
    python -m lexdrill --stats
    python -m lexdrill --reset
"""
import argparse
import sys
from typing import Callable, List, Optional

from lexdrill.config import ensure_directories, settings
from lexdrill.logging_config import get_logger, setup_logging
from lexdrill.models.base import SessionLocal, init_db
from lexdrill.monitoring import start_monitoring
from lexdrill.services.catalog import LessonCatalog
from lexdrill.services.drill_service import DrillService, DrillSession, LessonLockedError
from lexdrill.services.ledger_store import get_ledger_store
from lexdrill.services.unlock_gate import GateDecision, unlock_message

logger = get_logger(__name__)

InputFn = Callable[[str], Optional[str]]


def get_input(prompt: str = "") -> Optional[str]:
    """Get user input, return None on EOF."""
    try:
        return input(prompt)
    except EOFError:
        return None


def print_locked(decision: GateDecision) -> None:
    print(f"Lesson Locked: {unlock_message(decision)}")


def show_lessons(service: DrillService) -> None:
    print("Lessons")
    for overview in service.lesson_overview():
        lesson, progress = overview.lesson, overview.progress
        lock = "  " if overview.unlocked else "🔒"
        print(
            f"{lock} Lesson {lesson.id}: {lesson.name} ({lesson.direction.value}) - {lesson.description}\n"
            f"     {progress.learned_count} knew, {progress.learning_count} learning, "
            f"{progress.new_count} new ({progress.mastered_percent}%)"
        )
        if not overview.unlocked and overview.decision.blocking_lesson_id is not None:
            print(f"     Unlock: {settings.learning.unlock_threshold}% in Lesson {overview.decision.blocking_lesson_id}")


def show_stats(service: DrillService) -> None:
    overall = service.progress_service.overall_stats(service.ledger)
    print("Overall Progress")
    print(f"  Items practiced: {overall.items_played}")
    print(f"  Success rate:    {overall.success_rate}%")
    print(f"  {overall.total_correct} correct out of {overall.total_attempts} attempts")
    print()
    print("Item Progress")
    for row in service.progress_service.item_report(service.ledger):
        rate = "New" if row.success_rate is None else f"{row.success_rate}%"
        print(f"  {row.item.prompt:<20} {row.item.answer:<20} {row.item.direction.value}  {rate}")


def run_drill(session: DrillSession, get_input: InputFn = get_input) -> int:
    """Drill until the learner quits; returns the number of answered items."""
    answered = 0
    while True:
        item = session.next_item()
        if item is None:
            if session.mode == "practice":
                print("Complete Lesson 1 to unlock words for practice.")
            else:
                print("No words available in this lesson.")
            return answered

        print()
        print(f"Translate to {item.direction.answer_language}: {item.prompt}  [{item.entry.category}]")
        response = get_input("Enter = show answer | q = quit: ")
        if response is None or response.strip().lower() == "q":
            return answered

        print(f"  {item.answer}")
        while True:
            response = get_input("y = I knew it | n = nope | q = quit: ")
            if response is None or response.strip().lower() == "q":
                return answered
            choice = response.strip().lower()
            if choice in ("y", "n"):
                break
        session.answer(choice == "y")
        answered += 1

        progress = session.progress()
        print(f"  {progress.learned_count} knew, {progress.learning_count} learning, {progress.new_count} new")


def build_service(db=None) -> DrillService:
    """Load the catalog and ledger and wire a drill service."""
    catalog = LessonCatalog.from_files()
    store = get_ledger_store(db)
    ledger = store.load()
    return DrillService(catalog, ledger, store=store, notify_locked=print_locked)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Vocabulary drill with lesson gating")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--lessons", action="store_true", help="List lessons and their progress")
    group.add_argument("--lesson", type=int, metavar="N", help="Drill lesson N")
    group.add_argument("--practice", action="store_true", help="Practice items of all unlocked lessons")
    group.add_argument("--stats", action="store_true", help="Show answer statistics")
    group.add_argument("--reset", action="store_true", help="Clear all answer statistics")
    parser.add_argument("--category", action="append", help="Limit practice to a vocabulary category")
    parser.add_argument("--record", action="store_true", help="Record answers given in practice mode")
    args = parser.parse_args(argv)

    ensure_directories()
    setup_logging("Starting lexdrill ...")
    if settings.monitoring.metrics_port:
        start_monitoring(settings.monitoring.metrics_port)

    db = None
    if settings.learning.ledger_backend == "sql":
        init_db()
        db = SessionLocal()
    try:
        service = build_service(db)

        if args.lessons:
            show_lessons(service)
        elif args.stats:
            show_stats(service)
        elif args.reset:
            service.reset_stats()
            print("Statistics reset.")
        elif args.practice:
            unknown = sorted(set(args.category or []) - set(service.catalog.categories()))
            if unknown:
                print(f"Unknown category: {', '.join(unknown)}. Available: {', '.join(service.catalog.categories())}")
                return 1
            run_drill(service.start_practice(categories=args.category, record_stats=args.record))
        else:
            try:
                session = service.start_lesson(args.lesson)
            except LessonLockedError:
                return 1
            except ValueError as e:
                print(str(e))
                return 1
            run_drill(session)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        if db is not None:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

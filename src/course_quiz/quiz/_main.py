"""Command-line entry points for taking and managing course quizzes."""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.prompt import Confirm

from course_quiz.core.logging import configure_logger

from . import catalog
from . import config as config_mod
from .errors import StoreError
from .models import Course, Identity, filter_questions
from .progress import select_committer
from .scheduler import ManualScheduler
from .session import QuizSession
from .source import resolve_quiz
from .store import CourseStore
from .view.console import RichNotifier, load_with_retry, run_quiz_session

USER_ENV = "COURSE_QUIZ_USER_ID"


def _add_identity_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--guest",
        action="store_true",
        help="Use the bundled demo courses; nothing is saved.",
    )
    group.add_argument(
        "--user",
        help=f"Signed-in user id (defaults to ${USER_ENV} when set).",
    )


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to course_quiz.toml (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root holding config, logs and store.",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="course-quiz quiz",
        description="Take multiple-choice quizzes generated for a course.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_start = sub.add_parser("start", help="Start a quiz for a course")
    sp_start.add_argument("course_id")
    _add_identity_arguments(sp_start)
    _add_config_arguments(sp_start)
    sp_start.add_argument(
        "--reveal-seconds",
        type=float,
        help="Seconds to show the answer before moving on.",
    )
    sp_start.add_argument(
        "--tui",
        action="store_true",
        help="Use the Textual interface instead of the console prompt.",
    )
    sp_start.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr.",
    )

    sp_courses = sub.add_parser("courses", help="Course-related commands")
    courses_sub = sp_courses.add_subparsers(dest="action", required=True)
    sp_list = courses_sub.add_parser("list", help="List available courses")
    _add_identity_arguments(sp_list)
    _add_config_arguments(sp_list)
    sp_import = courses_sub.add_parser(
        "import", help="Import a course and its questions from JSON"
    )
    sp_import.add_argument("path", type=Path)
    sp_import.add_argument("--user", required=True)
    _add_config_arguments(sp_import)

    sp_config = sub.add_parser("config", help="Manage course_quiz.toml")
    config_sub = sp_config.add_subparsers(dest="action", required=True)
    sp_c_init = config_sub.add_parser(
        "init", help="Write the default configuration template"
    )
    sp_c_init.add_argument("--path", type=Path)
    sp_c_init.add_argument("--force", action="store_true")
    sp_c_validate = config_sub.add_parser(
        "validate", help="Validate the active configuration file"
    )
    sp_c_validate.add_argument("--path", type=Path)
    sp_c_path = config_sub.add_parser(
        "path", help="Print the resolved config path"
    )
    sp_c_path.add_argument("--path", type=Path)
    return p


def _resolve_identity(args: argparse.Namespace) -> Identity:
    if getattr(args, "guest", False):
        return Identity.guest()
    user = getattr(args, "user", None) or os.environ.get(USER_ENV, "")
    return Identity(user.strip() or None)


def _load(args: argparse.Namespace) -> config_mod.LoadResult:
    return config_mod.load_config(
        explicit_path=getattr(args, "config", None),
        workspace_path=getattr(args, "workspace", None),
    )


def _cmd_start(args: argparse.Namespace) -> int:
    try:
        loaded_config = _load(args)
    except config_mod.QuizConfigError as exc:
        _print_error(f"Error: {exc}")
        return 2
    cfg = loaded_config.config
    layout = loaded_config.layout
    reveal_seconds = (
        args.reveal_seconds
        if args.reveal_seconds is not None
        else cfg.quiz.reveal_seconds
    )
    if reveal_seconds <= 0:
        _print_error("Error: --reveal-seconds must be greater than zero.")
        return 2

    logger, log_path = configure_logger(
        "course_quiz",
        log_dir=layout.path_for("logs"),
        level=cfg.logging.level,
        verbose=bool(args.verbose or cfg.logging.verbose),
    )
    identity = _resolve_identity(args)
    store = CourseStore(layout.path_for("store"))
    console = Console()
    notifier = RichNotifier(console)
    logger.debug(
        "quiz start invoked",
        extra={"course_id": args.course_id, "guest": identity.is_guest},
    )

    loaded = load_with_retry(
        lambda: resolve_quiz(args.course_id, identity=identity, store=store),
        console,
        notifier,
        confirm=lambda: Confirm.ask(
            "Retry loading?", console=console, default=False
        ),
    )
    if loaded is None:
        return 1

    use_tui = args.tui or cfg.quiz.ui == "tui"
    if use_tui:
        from .view.app import AppBridge, QuizApp

        bridge = AppBridge()
        session = QuizSession(
            loaded.course,
            loaded.questions,
            scheduler=bridge,
            committer=select_committer(identity, store, bridge),
            reveal_seconds=reveal_seconds,
            points_per_correct=cfg.quiz.points_per_correct,
        )
        QuizApp(session, bridge, guest=identity.is_guest).run()
        return 0

    scheduler = ManualScheduler()
    session = QuizSession(
        loaded.course,
        loaded.questions,
        scheduler=scheduler,
        committer=select_committer(identity, store, notifier),
        reveal_seconds=reveal_seconds,
        points_per_correct=cfg.quiz.points_per_correct,
    )
    result = run_quiz_session(
        session,
        scheduler,
        console,
        lambda: _prompt(console),
        guest=identity.is_guest,
        sleep=time.sleep,
    )
    logger.info(
        "quiz session ended",
        extra={"exit_action": result.exit_action, "log_path": log_path},
    )
    return 0


def _prompt(console: Console) -> str:
    return console.input("[bold]> [/]")


def _cmd_courses_list(args: argparse.Namespace) -> int:
    identity = _resolve_identity(args)
    if identity.is_guest:
        courses = [
            Course.from_record(record)
            for record in catalog.demo_course_records()
        ]
    else:
        try:
            store = CourseStore(_load(args).layout.path_for("store"))
            courses = [
                Course.from_record(row)
                for row in store.list_courses(str(identity.user_id))
            ]
        except (config_mod.QuizConfigError, StoreError) as exc:
            _print_error(f"Error: {exc}")
            return 2
    if not courses:
        print("No courses found.")
        return 1
    width = max(len(course.id) for course in courses)
    for course in courses:
        print(f"{course.id:<{width}}  {course.progress:>3}%  {course.title}")
    return 0


def _cmd_courses_import(args: argparse.Namespace) -> int:
    try:
        payload = json.loads(Path(args.path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        _print_error(f"Error: could not read {args.path}: {exc}")
        return 2
    try:
        course, questions = _parse_bundle(payload)
    except ValueError as exc:
        _print_error(f"Error: {exc}")
        return 2
    try:
        store = CourseStore(_load(args).layout.path_for("store"))
        row = store.import_course(args.user, course, questions)
    except (config_mod.QuizConfigError, StoreError) as exc:
        _print_error(f"Error: {exc}")
        return 2
    usable = len(filter_questions(questions))
    print(
        f"Imported course '{row['id']}' with {len(questions)} question(s) "
        f"({usable} usable)."
    )
    return 0


def _parse_bundle(
    payload: Any,
) -> tuple[Mapping[str, Any], list[Mapping[str, Any]]]:
    if not isinstance(payload, Mapping):
        raise ValueError("course bundle must be a JSON object")
    course = payload.get("course")
    if not isinstance(course, Mapping):
        raise ValueError("course bundle needs a 'course' object")
    questions = payload.get("questions", [])
    if not isinstance(questions, list) or not all(
        isinstance(item, Mapping) for item in questions
    ):
        raise ValueError("'questions' must be a list of objects")
    return course, questions


def _cmd_config(args: argparse.Namespace) -> int:
    try:
        if args.action == "init":
            target = config_mod.resolve_config_path(explicit_path=args.path)
            config_mod.write_template(target, overwrite=args.force)
            print(f"Wrote config template to {target}")
            return 0
        if args.action == "validate":
            result = config_mod.load_config(explicit_path=args.path)
            cfg = result.config
            print("Configuration OK")
            print(f"  workspace: {result.layout.home}")
            print(f"  reveal_seconds: {cfg.quiz.reveal_seconds}")
            print(f"  points_per_correct: {cfg.quiz.points_per_correct}")
            print(f"  ui: {cfg.quiz.ui}")
            return 0
        print(config_mod.resolve_config_path(explicit_path=args.path))
        return 0
    except config_mod.QuizConfigError as exc:
        _print_error(f"Error: {exc}")
        return 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command == "start":
        return _cmd_start(args)
    if args.command == "courses":
        if args.action == "list":
            return _cmd_courses_list(args)
        return _cmd_courses_import(args)
    if args.command == "config":
        return _cmd_config(args)
    parser.error("Command not implemented yet.")
    return 2


def _print_error(message: str) -> None:
    sys.stderr.write(message + "\n")


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

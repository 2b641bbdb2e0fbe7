"""Configuration for quiz runs, backed by ``course_quiz.toml``.

Values resolve with the precedence CLI override > TOML file > defaults. The
file lives in the workspace ``config/`` directory unless ``--config`` or
``COURSE_QUIZ_CONFIG`` points elsewhere.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from course_quiz.core import config as core_config
from course_quiz.core import workspace as workspace_mod

CONFIG_FILENAME = "course_quiz.toml"
CONFIG_PATH_ENV = "COURSE_QUIZ_CONFIG"
UI_CHOICES = ("console", "tui")
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizSettings:
    reveal_seconds: float
    points_per_correct: int
    ui: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class QuizConfig:
    data_home: Optional[Path]
    quiz: QuizSettings
    logging: LoggingConfig


@dataclass(frozen=True)
class LoadResult:
    """Loaded configuration plus the workspace it was resolved against."""

    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    layout: workspace_mod.WorkspaceLayout | None = None,
) -> Path:
    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    env_override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if env_override:
        return Path(env_override).expanduser().resolve()
    if layout is None:
        try:
            layout = workspace_mod.ensure_workspace(env=env_map)
        except workspace_mod.WorkspaceError as exc:
            raise QuizConfigError(str(exc)) from exc
    return layout.path_for("config") / CONFIG_FILENAME


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load and validate the quiz configuration.

    A missing file at the default location yields the defaults; a missing
    file that was asked for explicitly is an error.
    """

    env_map = os.environ if env is None else env
    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    path = resolve_config_path(
        explicit_path=explicit_path, env=env_map, layout=layout
    )
    tree = default_tree()
    loaded_path: Optional[Path] = None
    if path.exists():
        try:
            core_config.merge_defaults(tree, core_config.load_toml(path))
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
        loaded_path = path
    elif explicit_path is not None or env_map.get(CONFIG_PATH_ENV):
        raise QuizConfigError(f"Config file not found: {path}")

    config = _build_config(tree)
    if config.data_home is not None and workspace_path is None:
        try:
            layout = workspace_mod.ensure_workspace(
                env=env_map, path=config.data_home
            )
        except workspace_mod.WorkspaceError as exc:
            raise QuizConfigError(str(exc)) from exc
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _build_config(tree: Mapping[str, Any]) -> QuizConfig:
    try:
        raw_home = tree["paths"]["data_home"]
        if raw_home is not None and (
            not isinstance(raw_home, str) or not raw_home.strip()
        ):
            raise core_config.TomlConfigError(
                "'paths.data_home' must be a non-empty string when set."
            )
        quiz_section = tree["quiz"]
        logging_section = tree["logging"]
        settings = QuizSettings(
            reveal_seconds=core_config.require_positive_number(
                quiz_section["reveal_seconds"], field="quiz.reveal_seconds"
            ),
            points_per_correct=core_config.require_positive_int(
                quiz_section["points_per_correct"],
                field="quiz.points_per_correct",
            ),
            ui=core_config.require_choice(
                quiz_section["ui"], field="quiz.ui", choices=UI_CHOICES
            ),
        )
        logging_config = LoggingConfig(
            level=core_config.require_choice(
                logging_section["level"],
                field="logging.level",
                choices=LOG_LEVELS,
            ).upper(),
            verbose=core_config.require_bool(
                logging_section["verbose"], field="logging.verbose"
            ),
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc
    data_home = Path(raw_home).expanduser() if raw_home else None
    return QuizConfig(
        data_home=data_home, quiz=settings, logging=logging_config
    )


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_toml_template(
            path, template=config_template(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc


_DEFAULTS: Dict[str, Any] = {
    "paths": {
        "data_home": None,
    },
    "quiz": {
        "reveal_seconds": 2.0,
        "points_per_correct": 10,
        "ui": "console",
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# course-quiz configuration

[paths]
# Set to override the default data directory (~/.course-quiz-data)
# data_home = "~/my-quiz-data"

[quiz]
# Seconds the correct answer and explanation stay on screen
reveal_seconds = 2.0
# Points awarded per correct answer
points_per_correct = 10
# Front-end used by `course-quiz quiz start`: "console" or "tui"
ui = "console"

[logging]
level = "INFO"
verbose = false
"""

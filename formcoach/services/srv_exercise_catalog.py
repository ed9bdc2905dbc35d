"""
Exercise catalog service.

Loads exercise definitions from JSON, validates them and hands out
immutable configs and ready-to-start sessions.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from formcoach.core.config import Settings
from formcoach.engine.core.data_types import ExerciseConfig
from formcoach.engine.modules.session import ExerciseSession
from formcoach.helpers.exceptions import ExerciseConfigError
from formcoach.schemas.sche_exercise import ExerciseSchema, ExerciseSummaryResponse

logger = logging.getLogger(__name__)


def load_exercise(data: Dict) -> ExerciseSchema:
    """
    Validate one exercise definition.

    Raises:
        ExerciseConfigError: If the definition is invalid.
    """
    try:
        return ExerciseSchema.model_validate(data)
    except ValidationError as e:
        exercise_id = data.get('id', '<unknown>') if isinstance(data, dict) else '<unknown>'
        logger.error(f"[CATALOG] Invalid exercise {exercise_id}: {e.error_count()} error(s)")
        raise ExerciseConfigError(f"Invalid exercise definition '{exercise_id}'", errors=e.errors()) from e


def load_exercise_catalog(path: Union[str, Path]) -> List[ExerciseSchema]:
    """
    Load a JSON catalog: either a list of exercises or {"exercises": [...]}.

    Raises:
        ExerciseConfigError: If the file is malformed or any exercise is invalid.
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ExerciseConfigError(f"Catalog {path} is not valid JSON: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get('exercises', [])
    if not isinstance(raw, list):
        raise ExerciseConfigError(f"Catalog {path} must contain a list of exercises")

    exercises = [load_exercise(item) for item in raw]
    logger.info(f"[CATALOG] Loaded {len(exercises)} exercises from {path}")
    return exercises


class ExerciseCatalogService:
    def __init__(self, exercises: Iterable[ExerciseSchema] = (), settings: Optional[Settings] = None):
        self.settings = settings
        self._exercises: Dict[str, ExerciseSchema] = {}
        for exercise in exercises:
            if exercise.id in self._exercises:
                raise ExerciseConfigError(f"Duplicate exercise id '{exercise.id}'")
            self._exercises[exercise.id] = exercise

    @classmethod
    def from_file(cls, path: Union[str, Path], settings: Optional[Settings] = None) -> 'ExerciseCatalogService':
        return cls(load_exercise_catalog(path), settings=settings)

    def get_all_exercises(self) -> List[ExerciseSummaryResponse]:
        return [
            ExerciseSummaryResponse(
                id=e.id,
                name=e.name,
                description=e.description,
                ailments=e.ailments,
                tracked_joint=e.tracked_joint,
                cycle_duration=e.cycle_duration,
            )
            for e in self._exercises.values()
        ]

    def get_exercise_by_id(self, exercise_id: str) -> Optional[ExerciseSchema]:
        return self._exercises.get(exercise_id)

    def get_config(self, exercise_id: str) -> ExerciseConfig:
        exercise = self.get_exercise_by_id(exercise_id)
        if exercise is None:
            raise ExerciseConfigError(f"Exercise '{exercise_id}' not found", errors=[])
        return exercise.to_config()

    def create_session(self, exercise_id: str, **kwargs) -> ExerciseSession:
        kwargs.setdefault('settings', self.settings)
        return ExerciseSession(self.get_config(exercise_id), **kwargs)

"""
Exercise catalog schemas.

Exercise definitions are validated here, once, at load time. The engine
assumes every ExerciseConfig it receives has a positive cycle duration.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from formcoach.engine.core.data_types import ExerciseConfig, JointType, Phase, PhaseName

logger = logging.getLogger(__name__)


class PhaseSchema(BaseModel):
    name: str = Field(..., description="Phase kind: ready, raise, hold or lower")
    duration: float = Field(..., gt=0, description="Phase length in seconds")

    @field_validator('name')
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {p.value for p in PhaseName}:
            logger.warning(f"[CATALOG] Unknown phase name '{value}', it will expect the target angle")
        return value

    def to_phase(self) -> Phase:
        try:
            name = PhaseName(self.name)
        except ValueError:
            name = self.name
        return Phase(name=name, duration=self.duration)


class ExerciseSchema(BaseModel):
    id: str = Field(..., description="Exercise identifier")
    name: str = Field(..., description="Display name")
    description: Optional[str] = None
    ailments: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    instructions: Optional[str] = None

    tracked_joint: str = Field(..., description="Joint whose angle is scored")
    resting_angle: float = Field(..., ge=0, le=180)
    target_angle: float = Field(..., ge=0, le=180)
    tolerance: float = Field(..., gt=0, description="On-target deviation in degrees")
    phases: List[PhaseSchema] = Field(..., min_length=1)

    @field_validator('tracked_joint')
    @classmethod
    def check_tracked_joint(cls, value: str) -> str:
        return JointType.parse(value).value

    @model_validator(mode='after')
    def check_cycle_duration(self) -> 'ExerciseSchema':
        if sum(phase.duration for phase in self.phases) <= 0:
            raise ValueError('cycle duration must be positive')
        return self

    @property
    def cycle_duration(self) -> float:
        return sum(phase.duration for phase in self.phases)

    def to_config(self) -> ExerciseConfig:
        return ExerciseConfig(
            tracked_joint=JointType.parse(self.tracked_joint),
            resting_angle=self.resting_angle,
            target_angle=self.target_angle,
            tolerance=self.tolerance,
            phases=tuple(phase.to_phase() for phase in self.phases),
        )


class ExerciseSummaryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    ailments: List[str] = Field(default_factory=list)
    tracked_joint: str
    cycle_duration: float

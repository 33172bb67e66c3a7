"""Level-up model"""
from pydantic import BaseModel, ConfigDict, Field


class LevelUpResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    old_level: int
    new_level: int
    points_required: int
    total_points: int
    unlocked_features: list[str] = Field(default_factory=list)
    celebration_message: str

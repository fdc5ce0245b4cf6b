from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from backend.app.api.config import cors_allow_origins, point_in_time_aggregates_enabled

router = APIRouter(prefix="/api", tags=["config"])


class ConfigOut(BaseModel):
    point_in_time_aggregates: bool
    cors_allow_origins: list[str]


@router.get("/config", response_model=ConfigOut)
def get_config() -> ConfigOut:
    return ConfigOut(
        point_in_time_aggregates=point_in_time_aggregates_enabled(),
        cors_allow_origins=cors_allow_origins(),
    )

from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str]

class SchedulerRules(BaseModel):
    tick_interval_seconds: float = Field(default=60.0, gt=0)
    stop_timeout_seconds: float = Field(default=5.0, ge=0)
    clear_published_at_on_unpublish: bool = False
    backfill_legacy_on_start: bool = True
    autostart: bool = True

class ContentRules(BaseModel):
    # None keeps every revision
    revision_history_limit: int | None = Field(default=10, ge=0)
    status_values: list[str] = ["draft", "published", "archived"]

class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = []

class Rules(BaseModel):
    project: ProjectRules
    scheduler: SchedulerRules = SchedulerRules()
    content: ContentRules = ContentRules()
    ops: OpsRules = OpsRules()

"""
Pydantic schemas for the structured run report (behave/cucumber JSON) and for
the unified, Allure-compatible per-scenario results.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _join_lines(value):
    if isinstance(value, list):
        return "\n".join(str(line) for line in value)
    return value


def _tag_names(value):
    if not value:
        return []
    return [tag.get("name", "") if isinstance(tag, dict) else str(tag) for tag in value]


# --- Structured report (input) ---

REPORTED_STATUSES = ("passed", "failed", "skipped")

# behave statuses outside the reported set
STATUS_ALIASES = {
    "undefined": "failed",
    "error": "failed",
    "hook_error": "failed",
    "untested": "skipped",
}


class StepResult(BaseModel):
    status: str = "skipped"
    duration: float = Field(0, ge=0, description="Step duration in the report's time unit")
    error_message: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def map_runner_status(cls, v):
        v = str(v).lower()
        if v in REPORTED_STATUSES:
            return v
        return STATUS_ALIASES.get(v, "skipped")

    @field_validator("error_message", mode="before")
    @classmethod
    def join_error_lines(cls, v):
        return _join_lines(v)


class ReportStep(BaseModel):
    keyword: str = ""
    name: str = ""
    hidden: bool = False
    result: Optional[StepResult] = None

    @property
    def label(self) -> str:
        return f"{self.keyword.strip()} {self.name}".strip()

    @property
    def status(self) -> str:
        return self.result.status if self.result else "skipped"


class ReportScenario(BaseModel):
    id: Optional[str] = None
    name: str
    type: str = "scenario"
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    steps: List[ReportStep] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def join_description_lines(cls, v):
        return _join_lines(v) or ""

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, v):
        return _tag_names(v)


class ReportFeature(BaseModel):
    name: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    elements: List[ReportScenario] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def join_description_lines(cls, v):
        return _join_lines(v) or ""

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, v):
        return _tag_names(v)

    @property
    def scenarios(self) -> List[ReportScenario]:
        return [element for element in self.elements if element.type != "background"]


# --- Unified report (output) ---

class UnifiedModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Attachment(UnifiedModel):
    name: str
    source: str
    type: str = "image/png"


class Label(UnifiedModel):
    name: str
    value: str


class StatusDetails(UnifiedModel):
    message: str
    trace: str


class UnifiedStep(UnifiedModel):
    name: str
    status: str
    stage: str = "finished"
    start: int
    stop: int
    duration: int
    attachments: List[Attachment] = Field(default_factory=list)


class UnifiedResult(UnifiedModel):
    uuid: str
    history_id: str
    test_case_id: str
    name: str
    full_name: str
    description: str = ""
    status: str
    stage: str = "finished"
    start: int
    stop: int
    duration: int
    labels: List[Label] = Field(default_factory=list)
    steps: List[UnifiedStep] = Field(default_factory=list)
    status_details: Optional[StatusDetails] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

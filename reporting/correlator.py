"""
Offline correlation of a finished run.

Reads the structured step/scenario report, looks up screenshots for failed
steps (or every step when all steps were captured) in the artifact directory,
and produces one unified, Allure-compatible result per scenario.

Screenshots are matched by file name only: a candidate must contain both the
normalized scenario name and the normalized step name, case-insensitively.
Among matches the most recently modified file wins; equal modification times
are broken by the lexicographically greatest path.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from core.errors import ReportFormatError
from diagnostics.naming import normalize_name
from diagnostics.storage import list_images
from reporting.models import (
    Attachment,
    Label,
    ReportFeature,
    ReportScenario,
    StatusDetails,
    UnifiedResult,
    UnifiedStep,
)

logger = logging.getLogger(__name__)

# Multiplier converting a report duration to milliseconds
DURATION_TO_MS = {"ns": 1e-6, "ms": 1.0, "s": 1000.0}
STEP_OFFSET_MS = 100


@dataclass(frozen=True)
class ArtifactFile:
    path: Path
    modified: float


Matcher = Callable[[Sequence[ArtifactFile], str, str], Optional[ArtifactFile]]


def scan_artifacts(artifact_dir: Path) -> List[ArtifactFile]:
    """Image files in ``artifact_dir``; a missing directory has none."""
    return [ArtifactFile(path=p, modified=p.stat().st_mtime) for p in list_images(Path(artifact_dir))]


def select_screenshot(
    candidates: Sequence[ArtifactFile],
    scenario_name: str,
    step_name: str,
) -> Optional[ArtifactFile]:
    scenario_key = normalize_name(scenario_name).lower()
    step_key = normalize_name(step_name).lower()
    if not scenario_key or not step_key:
        return None
    matches = [
        c for c in candidates
        if scenario_key in c.path.name.lower() and step_key in c.path.name.lower()
    ]
    return max(matches, key=lambda c: (c.modified, str(c.path)), default=None)


def scenario_status(scenario: ReportScenario) -> str:
    statuses = [step.status for step in scenario.steps]
    if "failed" in statuses:
        return "failed"
    if "skipped" in statuses:
        return "skipped"
    return "passed"


def parse_structured_report(data) -> List[ReportFeature]:
    if not isinstance(data, list):
        raise ReportFormatError("Structured report must be a list of features")
    try:
        return [ReportFeature.model_validate(feature) for feature in data]
    except ValidationError as e:
        raise ReportFormatError(f"Malformed structured report: {e}") from e


def load_structured_report(path: Path) -> List[ReportFeature]:
    """
    Load and validate a behave/cucumber JSON report.

    Raises:
        ReportFormatError: If the file is missing, is not JSON or does not
            have the expected shape.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ReportFormatError(f"Structured report not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ReportFormatError(f"Structured report is not valid JSON: {path}: {e}") from e
    return parse_structured_report(data)


class ReportCorrelator:
    """
    Joins the structured report with the screenshots on disk.
    """

    def __init__(
        self,
        duration_unit: str = "s",
        debug_all_steps: bool = False,
        results_dir: Optional[Path] = None,
        matcher: Matcher = select_screenshot,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            duration_unit: Unit of step durations in the structured report (ns, ms or s)
            debug_all_steps: Look up screenshots for every step, not only failed ones
            results_dir: Attachment paths are made relative to this directory (cwd if omitted)
            matcher: Picks the screenshot for one step among all candidates
            clock: Source of the run end time in seconds
        """
        if duration_unit not in DURATION_TO_MS:
            raise ValueError(f"Unknown duration unit: {duration_unit}")
        self.to_ms = DURATION_TO_MS[duration_unit]
        self.debug_all_steps = debug_all_steps
        self.results_dir = Path(results_dir) if results_dir else None
        self.matcher = matcher
        self.clock = clock

    def correlate(self, report, artifact_dir: Path) -> List[UnifiedResult]:
        """
        Args:
            report: Parsed features, raw report data, or a path to the report file
            artifact_dir: Screenshot directory
        """
        if isinstance(report, (str, Path)):
            features = load_structured_report(Path(report))
        elif report and all(isinstance(f, ReportFeature) for f in report):
            features = list(report)
        else:
            features = parse_structured_report(report)

        candidates = scan_artifacts(artifact_dir)
        logger.info(f"Correlating {len(features)} feature(s) with {len(candidates)} screenshot(s)")

        results = []
        for feature in features:
            for scenario in feature.scenarios:
                results.append(self._scenario_result(feature, scenario, candidates))
        return results

    def _duration_ms(self, raw: float) -> int:
        return int(round(raw * self.to_ms))

    def _attachment(self, candidates, scenario_name: str, step_name: str) -> Optional[Attachment]:
        match = self.matcher(candidates, scenario_name, step_name)
        if match is None:
            return None
        base = self.results_dir or Path.cwd()
        return Attachment(name=f"Screenshot: {step_name}", source=os.path.relpath(match.path, base))

    def _scenario_result(
        self,
        feature: ReportFeature,
        scenario: ReportScenario,
        candidates: Sequence[ArtifactFile],
    ) -> UnifiedResult:
        steps = [step for step in scenario.steps if not step.hidden and step.result is not None]
        duration = sum(self._duration_ms(step.result.duration) for step in scenario.steps if step.result)
        now = int(self.clock() * 1000)
        start = now - duration

        unified_steps = []
        for index, step in enumerate(steps):
            step_duration = self._duration_ms(step.result.duration)
            step_start = start + index * STEP_OFFSET_MS
            attachments = []
            if step.status == "failed" or self.debug_all_steps:
                attachment = self._attachment(candidates, scenario.name, step.name)
                if attachment is not None:
                    attachments.append(attachment)
            unified_steps.append(
                UnifiedStep(
                    name=step.label,
                    status=step.status,
                    start=step_start,
                    stop=step_start + step_duration,
                    duration=step_duration,
                    attachments=attachments,
                )
            )

        case_id = scenario.id or f"{normalize_name(feature.name).lower()};{normalize_name(scenario.name).lower()}"
        labels = [
            Label(name="feature", value=feature.name),
            Label(name="story", value=scenario.name),
            Label(name="suite", value=feature.name),
            Label(name="framework", value="behave"),
            Label(name="language", value="python"),
            Label(name="testClass", value=feature.name),
        ]
        for tag in dict.fromkeys(feature.tags + scenario.tags):
            labels.append(Label(name="tag", value=tag.lstrip("@")))

        status_details = None
        failed_step = next((step for step in scenario.steps if step.status == "failed"), None)
        if failed_step is not None and failed_step.result.error_message:
            error_text = failed_step.result.error_message
            status_details = StatusDetails(message=error_text.split("\n")[0], trace=error_text)

        return UnifiedResult(
            uuid=str(uuid.uuid4()),
            history_id=case_id,
            test_case_id=case_id,
            name=scenario.name,
            full_name=f"{feature.name}: {scenario.name}",
            description=scenario.description or feature.description,
            status=scenario_status(scenario),
            start=start,
            stop=now,
            duration=duration,
            labels=labels,
            steps=unified_steps,
            status_details=status_details,
        )


def correlate(report, artifact_dir: Path, **options) -> List[UnifiedResult]:
    """Convenience wrapper around ``ReportCorrelator(**options).correlate``."""
    return ReportCorrelator(**options).correlate(report, artifact_dir)


def write_allure_results(
    results: Iterable[UnifiedResult],
    out_dir: Path,
    environment: Optional[dict] = None,
) -> List[Path]:
    """
    Replace the contents of ``out_dir`` with one ``<uuid>-result.json`` per
    scenario plus an ``environment.properties`` file.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    for old in out_dir.iterdir():
        if old.is_file():
            old.unlink()

    written = []
    for result in results:
        path = out_dir / f"{result.uuid}-result.json"
        path.write_text(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        written.append(path)

    if environment:
        lines = [f"{key}={value}" for key, value in environment.items()]
        (out_dir / "environment.properties").write_text("\n".join(lines), encoding="utf-8")

    logger.info(f"Generated {len(written)} Allure result(s) in {out_dir}")
    return written

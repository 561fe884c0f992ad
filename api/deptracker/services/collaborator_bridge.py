"""Bridge to the external risk-scoring and scenario processes.

Each collaborator is an opaque command line. It receives a JSON document on
stdin and must print a JSON document on stdout. Anything else (missing
command, spawn failure, timeout, non-zero exit, unparseable output) is
reported as a CollaboratorError so callers can fall back.
"""
import json
import logging
import shlex
import subprocess
from typing import Any, Optional

from deptracker.core.config import settings

logger = logging.getLogger(__name__)


class CollaboratorError(Exception):
    """External collaborator unavailable or returned unusable output."""


class CollaboratorBridge:
    """Runs collaborator commands with a bounded timeout."""

    def __init__(
        self,
        risk_command: Optional[str] = None,
        analyzer_command: Optional[str] = None,
        scenario_command: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.risk_command = risk_command
        self.analyzer_command = analyzer_command
        self.scenario_command = scenario_command
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls) -> "CollaboratorBridge":
        return cls(
            risk_command=settings.RISK_SCORER_COMMAND,
            analyzer_command=settings.RISK_ANALYZER_COMMAND,
            scenario_command=settings.SCENARIO_GENERATOR_COMMAND,
            timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
        )

    def run(self, command: Optional[str], payload: Any = None) -> Any:
        """Run a collaborator command and return its decoded JSON output."""
        if not command:
            raise CollaboratorError("Collaborator command is not configured")

        try:
            completed = subprocess.run(
                shlex.split(command),
                input=json.dumps(payload, default=str),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CollaboratorError(
                f"Collaborator timed out after {self.timeout}s: {command}") from exc
        except OSError as exc:
            raise CollaboratorError(f"Failed to run collaborator: {exc}") from exc

        if completed.returncode != 0:
            raise CollaboratorError(
                f"Collaborator failed with code {completed.returncode}: {completed.stderr.strip()}")

        try:
            return json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            raise CollaboratorError("Collaborator returned invalid JSON") from exc

    def calculate_risk(self, payload: dict) -> int:
        """Score one dependency; returns an integer in [0, 100]."""
        result = self.run(self.risk_command, payload)
        score = result.get("riskScore") if isinstance(result, dict) else None
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise CollaboratorError(f"Malformed risk score response: {result!r}")
        if not 0 <= score <= 100:
            raise CollaboratorError(f"Risk score out of range: {score}")
        return int(round(score))

    def analyze_risk(self, payload: dict) -> dict:
        """Qualitative factors and recommendations for one dependency."""
        result = self.run(self.analyzer_command, payload)
        if not isinstance(result, dict):
            raise CollaboratorError("Malformed risk analysis response")
        factors = result.get("riskFactors")
        recommendations = result.get("recommendations")
        if not _is_string_list(factors) or not _is_string_list(recommendations):
            raise CollaboratorError("Malformed risk analysis response")
        return {"risk_factors": factors, "recommendations": recommendations}

    def generate_scenarios(self) -> list[dict]:
        result = self.run(self.scenario_command, {})
        if not isinstance(result, list):
            raise CollaboratorError("Malformed scenario response")
        scenarios = []
        for item in result:
            try:
                scenarios.append({
                    "id": int(item["id"]),
                    "name": str(item["name"]),
                    "description": str(item["description"]),
                    "risk_reduction": int(item["riskReduction"]),
                    "timeline_reduction": int(item["timelineReduction"]),
                    "complexity_score": int(item["complexityScore"]),
                })
            except (KeyError, TypeError, ValueError) as exc:
                raise CollaboratorError("Malformed scenario response") from exc
        return scenarios


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)

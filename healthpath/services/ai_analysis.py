from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from healthpath.growth.age import age
from healthpath.logging_config import get_logger
from healthpath.schemas.child import Child
from healthpath.schemas.report import LabReport
from healthpath.utils.time import as_date


logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "API Key is not configured."
ERROR_MESSAGE = "There was an error generating the AI analysis for your child. Please try again."
REPORT_NOT_CONFIGURED_MESSAGE = "API Key is not configured. Cannot provide AI analysis."
REPORT_ERROR_MESSAGE = "There was an error processing your request. Please try again."

DISCLAIMER = (
    "***MEDICAL DISCLAIMER: This is an AI-generated analysis for educational purposes only. "
    "It is NOT a substitute for professional medical advice. Always consult a pediatrician "
    "for any health concerns regarding your child.***"
)

REPORT_DISCLAIMER = (
    "***MEDICAL DISCLAIMER: This is an AI-generated analysis for educational purposes only. "
    "It is NOT a medical diagnosis. Please consult a qualified healthcare professional "
    "for any health concerns.***"
)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:g}"


def build_child_prompt(child: Child, today: Any = None) -> str:
    a = age(child.dob, today)
    lines = []
    for r in child.growth_records or []:
        if r is None or r.date is None:
            continue
        lines.append(
            f"- On {r.date.date().isoformat()}: Height {_fmt(r.height_cm)} cm, Weight {_fmt(r.weight_kg)} kg"
        )
    growth = "\n".join(lines) or "No growth records available."
    dob = as_date(child.dob)

    return f"""
You are HealthPath, an assistant giving educational notes on child development from
data entered by a parent. You do not diagnose.

Begin your answer with this exact line:
"{DISCLAIMER}"

**Child's Profile:**
- Name: {child.name}
- Date of birth: {dob.isoformat() if dob else "unknown"}
- Age: {a.years} years, {a.months} months
- Gender: {child.gender}
- Birth Weight: {_fmt(child.birth_weight_kg)} kg

**Growth Records (most recent is last):**
{growth}

**Vaccination Status (manual entries):**
{json.dumps(child.vaccinations or {}, indent=2, sort_keys=True)}

**Task:**
Write a Markdown summary with these numbered sections:
1. **Growth Summary:** describe the overall trend of the recorded points without quoting percentiles.
2. **Vaccination Adherence:** mention vaccines that look upcoming or possibly missed for this age.
3. **Age-Appropriate Wellness Tips:** two or three general, non-medical tips for a child of this age.

**Rules:**
- Never name a diagnosis.
- Use supportive wording and suggest talking to a pediatrician where relevant.
""".strip()


def build_report_prompt(report: LabReport) -> str:
    when = report.date.date().isoformat()
    results = "\n".join(
        f"- {r.test_name}: {r.value} {r.unit} (Normal Range: {r.normal_range or 'N/A'})" for r in report.results
    ) or "No results recorded."

    return f"""
You are HealthPath, an assistant giving educational notes on lab reports. You do not diagnose.
Analyze the following historical lab report from {when}.

Begin your answer with this exact line:
"{REPORT_DISCLAIMER}"

**Report Data:**
```
{results}
```

**Task:**
Write a Markdown summary with these numbered sections:
1. **Report Summary:** one or two sentences on the overall findings of the report from {when}.
2. **Key Findings:** a bulleted list of values outside their normal range, each with the test, its value, the range and a simple educational note.
3. **Overall Status:** a general closing statement about the report.

**Rules:**
- Never name a diagnosis or suggest treatments.
- Use simple, easy-to-understand language.
""".strip()


class GeminiClient:
    """Minimal client for the Gemini generateContent REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> Optional["GeminiClient"]:
        ai_cfg = cfg.get("ai", {})
        api_key = os.environ.get(ai_cfg.get("api_key_env", "GEMINI_API_KEY"), "")
        if not api_key:
            logger.warning("AI API key not set; analysis is disabled")
            return None
        return cls(
            api_key=api_key,
            model=ai_cfg.get("model", "gemini-2.5-flash"),
            base_url=ai_cfg.get("base_url", "https://generativelanguage.googleapis.com/v1beta"),
            timeout=float(ai_cfg.get("timeout", 60)),
        )

    def generate(self, prompt: str) -> str:
        r = self.session.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers={"x-goog-api-key": self.api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            timeout=self.timeout,
        )
        r.raise_for_status()
        data = r.json()
        candidates = data.get("candidates") or []
        if not candidates:
            raise ValueError("Response contained no candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts)


def analyze_child(child: Child, client: Optional[TextGenerator], today: Any = None) -> str:
    """Free-text analysis for one child. Failures come back as a displayable message."""
    if client is None:
        return NOT_CONFIGURED_MESSAGE
    try:
        return client.generate(build_child_prompt(child, today=today))
    except Exception as e:
        logger.error("AI child analysis failed", child_id=child.id, error=str(e))
        return ERROR_MESSAGE


def analyze_report(report: LabReport, client: Optional[TextGenerator]) -> str:
    """Free-text summary of one historical lab report, same failure contract as analyze_child."""
    if client is None:
        return REPORT_NOT_CONFIGURED_MESSAGE
    try:
        return client.generate(build_report_prompt(report))
    except Exception as e:
        logger.error("AI report analysis failed", report_id=report.id, error=str(e))
        return REPORT_ERROR_MESSAGE


@dataclass
class AnalysisSlot:
    loading: bool = False
    analysis: Optional[str] = None


class AnalysisTracker:
    """
    Latest analysis per child.

    A new request clears the previous result; whichever call finishes last
    owns the slot. A stalled call leaves the slot loading.
    """

    def __init__(self) -> None:
        self._slots: Dict[str, AnalysisSlot] = {}

    def get(self, child_id: str) -> AnalysisSlot:
        return self._slots.get(child_id, AnalysisSlot())

    def start(self, child_id: str) -> None:
        self._slots[child_id] = AnalysisSlot(loading=True, analysis=None)

    def finish(self, child_id: str, analysis: str) -> None:
        self._slots[child_id] = AnalysisSlot(loading=False, analysis=analysis)

    def run(self, child: Child, client: Optional[TextGenerator], today: Any = None) -> str:
        self.start(child.id)
        text = analyze_child(child, client, today=today)
        self.finish(child.id, text)
        return text

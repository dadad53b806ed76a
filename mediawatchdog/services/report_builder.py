"""
report_builder.py — Plain-text analysis report.

The layout is fixed: downstream consumers parse these files by section
header, so header order, banner widths and the "Label: NN%" line format must
not change.
"""

import re
from datetime import datetime, timezone

from mediawatchdog.models.analysis import AnalysisResult
from mediawatchdog.services.score_generator import js_round

_BANNER = "=" * 55

_HEADER = """
{banner}
MediaWatchdog Deepfake Analysis Report
{banner}
Date: {date}
Media Type: {media_type}
File Name: {file_name}
Analysis Version: {analysis_version}
Dataset Reference: {dataset_reference}
{banner}

ANALYSIS RESULTS
---------------
Overall Result: {overall_result}
Confidence Interval: {confidence_interval}

CORE METRICS
-----------
Authenticity Score: {authenticity}%
Manipulation Probability: {manipulation_probability}%
Confidence Score: {confidence}%

MEDIA-SPECIFIC METRICS
--------------------
"""

_FOOTER = """
DETAILED ANALYSIS
---------------
{explanation}

{banner}
Generated by MediaWatchdog - Advanced Deepfake Detection System
Using DFDC & DFD Dataset Training Models
{banner}
"""


def format_report_date(value: datetime) -> str:
    """en-US locale string, e.g. "3/7/2026, 4:05:09 PM"."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {meridiem}"


def metric_label(key: str) -> str:
    """"audioVideoSync" → "Audio Video Sync"."""
    spaced = re.sub(r"([A-Z])", r" \1", key).strip()
    return spaced[:1].upper() + spaced[1:]


def build_report(result: AnalysisResult) -> str:
    report = _HEADER.format(
        banner=_BANNER,
        date=format_report_date(result.analysis_date),
        media_type=result.media_type.value.capitalize(),
        file_name=result.file_name,
        analysis_version=result.analysis_version,
        dataset_reference=result.dataset_reference,
        overall_result=result.overall_result,
        confidence_interval=result.confidence_interval,
        authenticity=js_round(result.base_metrics.authenticity),
        manipulation_probability=js_round(result.base_metrics.manipulation_probability),
        confidence=js_round(result.base_metrics.confidence),
    )

    metrics = result.specific_metrics.model_dump(by_alias=True, exclude={"kind"})
    for key, value in metrics.items():
        report += f"{metric_label(key)}: {js_round(value)}%\n"

    report += _FOOTER.format(banner=_BANNER, explanation=result.detailed_explanation)
    return report


def report_filename(now: datetime | None = None) -> str:
    """deepfake-analysis-<epoch milliseconds>.txt"""
    now = now or datetime.now(tz=timezone.utc)
    return f"deepfake-analysis-{int(now.timestamp() * 1000)}.txt"

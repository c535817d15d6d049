"""In-process metrics collector with Prometheus text exposition."""

from __future__ import annotations

from collections import defaultdict
from threading import Lock
import time
from typing import Dict, Tuple


_lock = Lock()
_started_at = time.time()

_http_requests_total: Dict[Tuple[str, str, str], int] = defaultdict(int)
_http_request_duration_sum: Dict[Tuple[str, str], float] = defaultdict(float)
_http_request_duration_count: Dict[Tuple[str, str], int] = defaultdict(int)
_image_generations_total: Dict[str, int] = defaultdict(int)
_checkouts_created_total: Dict[str, int] = defaultdict(int)
_fulfillment_outcomes_total: Dict[str, int] = defaultdict(int)


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _normalize_label(value: str, *, fallback: str = "unknown") -> str:
    normalized = (value or "").strip()
    return normalized or fallback


def record_http_request(*, method: str, path: str, status_code: int, duration_seconds: float) -> None:
    status = str(status_code)
    method_label = method.upper()
    path_label = path or "unknown"
    duration = max(duration_seconds, 0.0)

    with _lock:
        _http_requests_total[(method_label, path_label, status)] += 1
        _http_request_duration_sum[(method_label, path_label)] += duration
        _http_request_duration_count[(method_label, path_label)] += 1


def record_image_generation(*, outcome: str) -> None:
    with _lock:
        _image_generations_total[_normalize_label(outcome)] += 1


def record_checkout_created(*, provider: str) -> None:
    with _lock:
        _checkouts_created_total[_normalize_label(provider)] += 1


def record_fulfillment_outcome(*, phase: str) -> None:
    with _lock:
        _fulfillment_outcomes_total[_normalize_label(phase)] += 1


def _render_single_label_counter(
    lines: list[str],
    *,
    name: str,
    help_text: str,
    label: str,
    values: Dict[str, int],
) -> None:
    lines.extend(
        [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} counter",
        ]
    )
    for key, value in sorted(values.items()):
        lines.append(f'{name}{{{label}="{_escape_label(key)}"}} {value}')


def render_prometheus_metrics(*, app_name: str, app_version: str, env: str) -> str:
    uptime = max(time.time() - _started_at, 0.0)

    with _lock:
        http_total = dict(_http_requests_total)
        duration_sum = dict(_http_request_duration_sum)
        duration_count = dict(_http_request_duration_count)
        generations_total = dict(_image_generations_total)
        checkouts_total = dict(_checkouts_created_total)
        fulfillment_total = dict(_fulfillment_outcomes_total)

    lines = [
        "# HELP promptpay_build_info Build metadata.",
        "# TYPE promptpay_build_info gauge",
        (
            f'promptpay_build_info{{app_name="{_escape_label(app_name)}",'
            f'version="{_escape_label(app_version)}",env="{_escape_label(env)}"}} 1'
        ),
        "# HELP promptpay_process_uptime_seconds Process uptime in seconds.",
        "# TYPE promptpay_process_uptime_seconds gauge",
        f"promptpay_process_uptime_seconds {uptime:.6f}",
        "# HELP promptpay_http_requests_total Total HTTP requests.",
        "# TYPE promptpay_http_requests_total counter",
    ]

    for (method, path, status), value in sorted(http_total.items()):
        lines.append(
            (
                f'promptpay_http_requests_total{{method="{_escape_label(method)}",'
                f'path="{_escape_label(path)}",status="{_escape_label(status)}"}} {value}'
            )
        )

    lines.extend(
        [
            "# HELP promptpay_http_request_duration_seconds Request duration summary.",
            "# TYPE promptpay_http_request_duration_seconds summary",
        ]
    )
    for (method, path), value in sorted(duration_sum.items()):
        lines.append(
            (
                f'promptpay_http_request_duration_seconds_sum{{method="{_escape_label(method)}",'
                f'path="{_escape_label(path)}"}} {value:.6f}'
            )
        )
    for (method, path), value in sorted(duration_count.items()):
        lines.append(
            (
                f'promptpay_http_request_duration_seconds_count{{method="{_escape_label(method)}",'
                f'path="{_escape_label(path)}"}} {value}'
            )
        )

    _render_single_label_counter(
        lines,
        name="promptpay_image_generations_total",
        help_text="Image generation calls by outcome.",
        label="outcome",
        values=generations_total,
    )
    _render_single_label_counter(
        lines,
        name="promptpay_checkouts_created_total",
        help_text="Checkouts created by provider.",
        label="provider",
        values=checkouts_total,
    )
    _render_single_label_counter(
        lines,
        name="promptpay_fulfillment_outcomes_total",
        help_text="Fulfillment sessions by terminal phase.",
        label="phase",
        values=fulfillment_total,
    )

    lines.append("")
    return "\n".join(lines)


def reset_metrics_for_tests() -> None:
    global _started_at
    with _lock:
        _http_requests_total.clear()
        _http_request_duration_sum.clear()
        _http_request_duration_count.clear()
        _image_generations_total.clear()
        _checkouts_created_total.clear()
        _fulfillment_outcomes_total.clear()
    _started_at = time.time()

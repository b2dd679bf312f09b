from typing import Dict, Any, Tuple, Union
import logging
import re
import threading

from prometheus_client import Gauge

_VISITOR_KEY_RE = re.compile(r"(?i)^(ip|ips|visitor|visitors|visitor_id|client_ip|remote_addr)$")
_IPV4_RE = re.compile(r"^(\d{1,3}\.\d{1,3}\.\d{1,3})\.\d{1,3}$")


def _mask_visitor(v: Any) -> Any:
    if not isinstance(v, str):
        return v
    m = _IPV4_RE.match(v.strip())
    if m:
        return f"{m.group(1)}.x"
    # non-IPv4 identifiers: keep a short prefix only
    return v[:4] + "***" if len(v) > 4 else "***"


def _sanitize(obj: Any) -> Any:
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if _VISITOR_KEY_RE.match(str(k)):
                out[k] = [_mask_visitor(x) for x in v] if isinstance(v, (list, tuple)) else _mask_visitor(v)
            else:
                out[k] = _sanitize(v)
        return out
    if isinstance(obj, list):
        return [_sanitize(x) for x in obj]
    return obj

logger = logging.getLogger('platform_monitoring')

_gauges: Dict[Tuple[str, Tuple[str, ...]], Gauge] = {}
_gauges_lock = threading.Lock()


def log_event(event: Union[str, Dict[str, Any]], payload: Dict[str, Any] | None = None, level: int = logging.INFO):
    """Log a monitoring event to the central logger.

    Flexible signature supports:
      - log_event({'event': 'name', ...})
      - log_event('name', {...}) (preferred)

    Visitor identifiers in the payload are masked before logging.
    """
    if isinstance(event, str):
        record = {'event': event, **(payload or {})}
    else:
        record = event
    logger.log(level, 'MONITOR_EVENT %s', _sanitize(record))


def _gauge(name: str, label_names: Tuple[str, ...]) -> Gauge:
    key = (name, label_names)
    with _gauges_lock:
        gauge = _gauges.get(key)
        if gauge is None:
            gauge = Gauge(name, f'viewcounter metric {name}', labelnames=label_names)
            _gauges[key] = gauge
        return gauge


def prometheus_metric(name: str, value: float, labels: Dict[str, str] | None = None):
    """Set a Prometheus gauge and mirror the value to the log."""
    labels = labels or {}
    label_names = tuple(sorted(labels))
    gauge = _gauge(name, label_names)
    if label_names:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)
    logger.debug('PROM_METRIC %s=%s labels=%s', name, value, labels)

from __future__ import annotations

import json
from pathlib import Path

from core.actions import ActionKind
from core.state import CanvasSettings


SETTINGS_VERSION = 1

_INT_FIELDS = (
    "handle_area",
    "handle_display_size",
    "button_size",
    "button_x_offset",
    "button_y_offset",
    "button_icon_size",
    "slider_min",
    "slider_max",
    "slider_default",
    "slider_width",
    "slider_height",
    "slider_y_offset",
    "slider_hit_margin",
    "erase_reach",
    "duplicate_offset",
    "frame_interval_ms",
)


def _key_bindings_from_raw(raw: object, fallback: dict[str, str]) -> dict[str, str]:
    if not isinstance(raw, dict):
        return dict(fallback)
    valid = {k.value for k in ActionKind}
    out: dict[str, str] = {}
    for key, action_id in raw.items():
        key_name = str(key).strip().upper()
        if not key_name or str(action_id) not in valid:
            continue
        out[key_name] = str(action_id)
    return out


def settings_from_raw(raw: dict) -> CanvasSettings:
    defaults = CanvasSettings()
    values = {name: int(raw.get(name, getattr(defaults, name))) for name in _INT_FIELDS}

    origin = raw.get("ingest_origin", list(defaults.ingest_origin))
    if not isinstance(origin, (list, tuple)) or len(origin) != 2:
        origin = defaults.ingest_origin

    settings = CanvasSettings(
        ingest_origin=(int(origin[0]), int(origin[1])),
        show_debug=bool(raw.get("show_debug", defaults.show_debug)),
        key_bindings=_key_bindings_from_raw(raw.get("key_bindings"), defaults.key_bindings),
        **values,
    )

    # Keep slider bounds ordered and the default inside them.
    if settings.slider_min > settings.slider_max:
        settings.slider_min, settings.slider_max = settings.slider_max, settings.slider_min
    settings.slider_default = max(settings.slider_min, min(settings.slider_max, settings.slider_default))
    settings.frame_interval_ms = max(1, settings.frame_interval_ms)
    return settings


def settings_to_raw(settings: CanvasSettings) -> dict:
    raw = {name: int(getattr(settings, name)) for name in _INT_FIELDS}
    raw["ingest_origin"] = list(settings.ingest_origin)
    raw["show_debug"] = bool(settings.show_debug)
    raw["key_bindings"] = dict(settings.key_bindings)
    return raw


def save_settings(path: str, settings: CanvasSettings) -> None:
    payload = {"version": SETTINGS_VERSION, "settings": settings_to_raw(settings)}
    Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_settings(path: str) -> CanvasSettings:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    settings_raw = raw.get("settings", {}) if isinstance(raw, dict) else {}
    if not isinstance(settings_raw, dict):
        settings_raw = {}
    return settings_from_raw(settings_raw)

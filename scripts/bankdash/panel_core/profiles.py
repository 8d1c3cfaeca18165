"""Profile resolution and user config merging for the dashboard."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path

from panel_core.datasets import FALLBACK_MODULES
from panel_core.errors import DecodeError
from panel_core.models import ModuleRecord, decode_modules_payload

ALL_PANELS = ["header", "compliance", "dormant", "data_connection", "configuration"]

DEFAULT_ENDPOINTS: dict[str, str] = {
    "compliance": "",
    "dormant": "",
    "database_types": "https://db-api-service-641805125303.us-central1.run.app/db/databases",
    "save_connection": "https://db-api-service-641805125303.us-central1.run.app/db/connections/save",
    "csv_source": "https://banking-compliance-api-724464214717.us-central1.run.app/api/data",
}

BUILTIN_PROFILES: dict[str, dict] = {
    "overview": {
        "panels": ["header", "compliance", "dormant", "data_connection"],
        "refresh_seconds": 5,
    },
    "configuration": {
        "panels": ["header", "configuration"],
        "refresh_seconds": 5,
    },
}

DEFAULT_SETTINGS: dict = {
    "timeout_seconds": 10,
    "stale_seconds": 300,
    "download_dir": ".",
}


def default_profile_name() -> str:
    return os.environ.get("BANKDASH_PROFILE", "overview")


def load_user_config(path: str | None) -> dict:
    if not path:
        return {}

    config_path = Path(path)
    if not config_path.exists():
        raise ValueError(f"config path not found: {config_path}")

    try:
        loaded = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON config: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ValueError("config root must be a JSON object")
    return loaded


def _int_setting(key: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid {key}: {value!r}") from exc


def _merge_fallbacks(user_config: dict) -> dict[str, list[ModuleRecord]]:
    raw = copy.deepcopy(FALLBACK_MODULES)
    overrides = user_config.get("fallback_modules")
    if isinstance(overrides, dict):
        for key, modules in overrides.items():
            if key in raw:
                raw[key] = modules

    fallbacks: dict[str, list[ModuleRecord]] = {}
    for key, modules in raw.items():
        try:
            fallbacks[key] = decode_modules_payload({"modules": modules})
        except DecodeError as exc:
            raise ValueError(f"invalid fallback_modules.{key}: {exc}") from exc
    return fallbacks


def resolve_profile(profile: str, config_path: str | None = None) -> dict:
    if profile not in BUILTIN_PROFILES:
        raise ValueError(f"unknown profile: {profile}")

    resolved = copy.deepcopy(BUILTIN_PROFILES[profile])
    user_config = load_user_config(config_path)

    selected_profile = user_config.get("profile")
    if selected_profile:
        if selected_profile not in BUILTIN_PROFILES:
            raise ValueError(f"unknown profile in config: {selected_profile}")
        resolved = copy.deepcopy(BUILTIN_PROFILES[selected_profile])
        profile = selected_profile

    if "refresh_seconds" in user_config:
        value = _int_setting("refresh_seconds", user_config["refresh_seconds"])
        resolved["refresh_seconds"] = max(1, value)

    profile_panels = list(resolved["panels"])
    panel_config = user_config.get("panels")
    if isinstance(panel_config, dict):
        # disable map: {"dormant": false}
        resolved["panels"] = [p for p in profile_panels if panel_config.get(p, True)]
    elif isinstance(panel_config, list) and panel_config:
        # explicit order
        allowed = set(ALL_PANELS)
        filtered = [p for p in panel_config if p in allowed]
        if filtered:
            resolved["panels"] = filtered

    for key, default in DEFAULT_SETTINGS.items():
        resolved[key] = user_config.get(key, default)
    resolved["timeout_seconds"] = max(1, _int_setting("timeout_seconds", resolved["timeout_seconds"]))
    resolved["stale_seconds"] = max(0, _int_setting("stale_seconds", resolved["stale_seconds"]))
    resolved["download_dir"] = os.environ.get("BANKDASH_DOWNLOAD_DIR", resolved["download_dir"])

    endpoints = dict(DEFAULT_ENDPOINTS)
    endpoint_config = user_config.get("endpoints")
    if isinstance(endpoint_config, dict):
        for key, value in endpoint_config.items():
            if key in endpoints:
                endpoints[key] = str(value or "").strip()
    resolved["endpoints"] = endpoints
    resolved["fallbacks"] = _merge_fallbacks(user_config)

    resolved["name"] = profile
    return resolved

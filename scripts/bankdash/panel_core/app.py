"""Modular dashboard application entrypoint for bankdash."""

from __future__ import annotations

import argparse
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from panel_core.collectors.connection import FIELD_LABELS, ConnectionConfigurator
from panel_core.collectors.connection import collect as collect_configuration
from panel_core.collectors.modules import ModuleSource
from panel_core.collectors.modules import collect as collect_modules
from panel_core.collectors.uploads import DataConnectionSection
from panel_core.collectors.uploads import collect as collect_uploads
from panel_core.layout import select_layout_mode
from panel_core.models import PanelData
from panel_core.panels.connection import render as render_configuration
from panel_core.panels.header import render as render_header
from panel_core.panels.modules import render as render_modules
from panel_core.panels.uploads import render as render_uploads
from panel_core.profiles import default_profile_name, resolve_profile

logger = logging.getLogger(__name__)

ANALYSER_TITLES = {
    "compliance": "Compliance Analyser Dashboard",
    "dormant": "Dormant Analyser Dashboard",
}


@dataclass
class DashboardState:
    profile: dict
    session: requests.Session = field(default_factory=requests.Session)
    sources: dict[str, ModuleSource] = field(default_factory=dict)
    data_connection: DataConnectionSection | None = None
    configurator: ConnectionConfigurator | None = None


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_state(profile: dict, session: requests.Session | None = None) -> DashboardState:
    session = session or requests.Session()
    endpoints = profile["endpoints"]
    timeout = profile["timeout_seconds"]
    panels = profile.get("panels", [])
    state = DashboardState(profile=profile, session=session)

    for key, title in ANALYSER_TITLES.items():
        state.sources[key] = ModuleSource(
            key=key,
            title=title,
            fallback=profile["fallbacks"][key],
            endpoint=endpoints.get(key, ""),
            session=session,
            timeout=timeout,
            stale_seconds=profile["stale_seconds"],
        )

    state.data_connection = DataConnectionSection(
        csv_url=endpoints["csv_source"],
        download_dir=profile["download_dir"],
        session=session,
        timeout=timeout,
    )

    if "configuration" in panels:
        state.configurator = ConnectionConfigurator(
            types_url=endpoints["database_types"],
            save_url=endpoints["save_connection"],
            session=session,
            timeout=timeout,
        )
    return state


def ensure_configurator(state: DashboardState) -> ConnectionConfigurator:
    if state.configurator is None:
        endpoints = state.profile["endpoints"]
        state.configurator = ConnectionConfigurator(
            types_url=endpoints["database_types"],
            save_url=endpoints["save_connection"],
            session=state.session,
            timeout=state.profile["timeout_seconds"],
        )
        if "configuration" not in state.profile["panels"]:
            state.profile["panels"].append("configuration")
    return state.configurator


def _collect_core(state: DashboardState) -> dict[str, PanelData]:
    data = {key: collect_modules(source) for key, source in state.sources.items()}
    if state.data_connection is not None:
        data["data_connection"] = collect_uploads(state.data_connection)
    if state.configurator is not None:
        data["configuration"] = collect_configuration(state.configurator)
    return data


def _render_core(data: dict[str, PanelData], profile: dict, width: int):
    mode = select_layout_mode(width)
    panels = [name for name in profile.get("panels", []) if name == "header" or name in data]
    sources = {
        key: str(data[key].meta.get("source", "-"))
        for key in ANALYSER_TITLES
        if key in panels
    }

    rendered = []
    analysers = [key for key in panels if key in ANALYSER_TITLES]
    if mode == "wide" and len(analysers) > 1:
        # side by side halves the width available to each tile grid
        row = Table.grid(expand=True, padding=(0, 1))
        for _ in analysers:
            row.add_column(ratio=1)
        row.add_row(*[render_modules(data[key], "medium") for key in analysers])
        side_by_side = row
    else:
        side_by_side = None

    for name in panels:
        if name == "header":
            rendered.append(render_header(profile["name"], sources, mode))
        elif name in ANALYSER_TITLES:
            if side_by_side is None:
                rendered.append(render_modules(data[name], mode))
            elif name == analysers[0]:
                rendered.append(side_by_side)
        elif name == "data_connection":
            rendered.append(render_uploads(data[name]))
        elif name == "configuration":
            rendered.append(render_configuration(data[name]))
    return Group(*rendered)


def _json_output(profile: dict, data: dict[str, PanelData]) -> str:
    payload = {
        "profile": profile["name"],
        "collected_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    for name in profile.get("panels", []):
        if name in data:
            payload[name] = data[name].to_dict()
    return json.dumps(payload, indent=2)


def prompt_connection(configurator: ConnectionConfigurator, console: Console) -> bool:
    form = configurator.form
    for name, label in FIELD_LABELS:
        current = str(getattr(form, name))
        if name == "database_type" and configurator.database_options:
            value = Prompt.ask(
                label,
                choices=configurator.database_options,
                default=current or configurator.database_options[0],
                console=console,
            )
        else:
            value = Prompt.ask(label, default=current, console=console)
        configurator.set_field(name, value)
    return configurator.submit()


def _apply_actions(args: argparse.Namespace, state: DashboardState, console: Console) -> None:
    panels = state.profile["panels"]
    for key, source in state.sources.items():
        endpoint = getattr(args, f"{key}_endpoint", None)
        if endpoint:
            source.connect(endpoint)
        elif source.endpoint and key in panels:
            source.connect()

    if args.details:
        for source in state.sources.values():
            if source.key in panels:
                source.fetch_details(args.details)

    section = state.data_connection
    if section is not None:
        if args.files:
            section.select_files(args.files)
        if args.download:
            section.download_csv()

    if args.save_connection:
        prompt_connection(ensure_configurator(state), console)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Banking compliance dashboard panels")
    parser.add_argument("-l", "--live", action="store_true", help="Run live dashboard loop")
    parser.add_argument("--json", action="store_true", help="Emit JSON payload")
    parser.add_argument("--profile", default=default_profile_name(), help="Profile name: overview|configuration")
    parser.add_argument("--config", help="Optional JSON config file for panel/profile overrides")
    parser.add_argument("--refresh", type=int, help="Refresh interval seconds override")
    parser.add_argument("--compliance-endpoint", help="Connect the compliance analyser to this API endpoint")
    parser.add_argument("--dormant-endpoint", help="Connect the dormant analyser to this API endpoint")
    parser.add_argument("--details", metavar="TITLE", help="Fetch detail data for a module title")
    parser.add_argument("--files", nargs="+", metavar="PATH", help="Select files on the upload card")
    parser.add_argument("--download", action="store_true", help="Export the CSV source to exported-data.csv")
    parser.add_argument("--save-connection", action="store_true", help="Prompt for and save a database connection")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        profile = resolve_profile(args.profile, args.config)
    except ValueError as exc:
        parser.error(str(exc))

    refresh_seconds = max(1, int(args.refresh or profile.get("refresh_seconds", 5)))
    console = Console()
    state = build_state(profile)
    _apply_actions(args, state, console)

    if args.json:
        print(_json_output(profile, _collect_core(state)))
        return 0

    def build_renderable():
        return _render_core(_collect_core(state), profile, console.size.width)

    if args.live:
        with ThreadPoolExecutor(max_workers=len(state.sources), thread_name_prefix="refetch") as executor:
            with Live(build_renderable(), console=console, refresh_per_second=2, screen=True) as live:
                try:
                    while True:
                        time.sleep(refresh_seconds)
                        for source in state.sources.values():
                            source.refetch_if_stale(executor)
                        live.update(build_renderable())
                except KeyboardInterrupt:
                    return 0

    console.print(build_renderable())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Data connection section: URL, file upload and Azure SQL cards."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import requests

from panel_core.collectors import DEFAULT_TIMEOUT, get_json
from panel_core.csv_export import convert_to_csv
from panel_core.errors import DecodeError, FetchError
from panel_core.models import PanelData

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "exported-data.csv"

DOWNLOAD_FAILED_MESSAGE = "Download failed"
SELECT_AZURE_MESSAGE = "Please select an Azure resource first."
WARN_MESSAGES = (DOWNLOAD_FAILED_MESSAGE, SELECT_AZURE_MESSAGE)

AZURE_RESOURCES: dict[str, str] = {
    "banking-analytics": "Banking-Analytics-DB",
    "compliance-warehouse": "Compliance-Data-Warehouse",
}


class DataConnectionSection:
    """State for the three connection cards and their shared status line.

    The upload card moves from ``no_files`` to ``files_selected`` the first
    time any file is chosen and never moves back. Only file names are
    kept; nothing is uploaded.
    """

    def __init__(
        self,
        csv_url: str,
        download_dir: str | Path = ".",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.csv_url = csv_url
        self.download_dir = Path(download_dir)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.url = ""
        self.azure_resource = ""
        self.file_names: list[str] = []
        self.status_message: str | None = None

    @property
    def stage(self) -> str:
        return "files_selected" if self.file_names else "no_files"

    def connect_url(self, url: str) -> None:
        self.url = url.strip()
        logger.info("Connecting to URL: %s", self.url)
        self.status_message = "URL Connection Successful (mocked)."

    def connect_azure(self, resource: str | None = None) -> bool:
        if resource is not None:
            self.azure_resource = resource
        if self.azure_resource not in AZURE_RESOURCES:
            self.status_message = SELECT_AZURE_MESSAGE
            return False
        logger.info("Connecting to Azure: %s", self.azure_resource)
        self.status_message = "Azure SQL Connection Successful (mocked)."
        return True

    def select_files(self, paths: Iterable[str | Path]) -> list[str]:
        names = [Path(path).name for path in paths if str(path)]
        if names:
            self.file_names = names
            self.status_message = f"Uploaded: {', '.join(names)}"
        return list(self.file_names)

    def run_llm(self) -> None:
        self.status_message = "LLM operation started"

    def download_csv(self) -> Path | None:
        """Export the CSV source as ``exported-data.csv``; return its path."""
        self.status_message = "Fetching data..."
        target = self.download_dir / EXPORT_FILENAME
        try:
            text = convert_to_csv(get_json(self.session, self.csv_url, self.timeout))
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as handle:
                handle.write(text)
        except (FetchError, DecodeError, OSError) as exc:
            logger.error("CSV export from %s failed: %s", self.csv_url, exc)
            self.status_message = DOWNLOAD_FAILED_MESSAGE
            return None

        logger.info("CSV export written to %s", target)
        self.status_message = "CSV download started"
        return target


def collect(section: DataConnectionSection) -> PanelData:
    status = "warn" if section.status_message in WARN_MESSAGES else "ok"
    return PanelData(
        key="data_connection",
        title="Data Connection",
        status=status,
        items=[{"name": name} for name in section.file_names],
        meta={
            "stage": section.stage,
            "url": section.url,
            "azure_resource": section.azure_resource,
            "azure_resources": dict(AZURE_RESOURCES),
            "message": section.status_message,
        },
        errors=[],
    )

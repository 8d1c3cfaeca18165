"""Database connection configurator state and its collector."""

from __future__ import annotations

import logging

import requests

from panel_core.collectors import (
    DEFAULT_TIMEOUT,
    RequestSequence,
    describe_error,
    get_json,
    post_json,
)
from panel_core.errors import DecodeError, FetchError, ValidationError
from panel_core.models import ConnectionForm, PanelData, decode_database_types

logger = logging.getLogger(__name__)

TYPES_KEY = "database_types"

SECTIONS: dict[str, str] = {
    "Data Connector": "Data Connector description",
    "Schema Enrichment": "Table Schema description",
    "Prompt Setup": "Prompt Components description",
    "Training Console": "Dynamic Examples description",
    "Generation Configs": "Review & Create API description",
}
DEFAULT_SECTION = "Data Connector"

FIELD_LABELS = [
    ("database_type", "Database Type"),
    ("connection_name", "Connection Name"),
    ("server_name", "Server Name"),
    ("database_name", "Database Name"),
    ("port", "Port Number"),
    ("username", "User name"),
]

REQUIRED_FIELDS_MESSAGE = "Please fill in all required database connection fields."
INVALID_PORT_MESSAGE = "Port Number must be a valid number."
SAVING_MESSAGE = "Attempting to save database connection details..."
RECONNECT_MESSAGE = "Attempting to reconnect/re-verify database connection..."
REFRESHED_MESSAGE = "Database types refreshed and form cleared."
SERVER_ERROR_MESSAGE = (
    "Error saving database connection details: A server error occurred (Status 500). "
    "Please check your input and try again, or contact support if the issue persists."
)


class ConnectionConfigurator:
    """Form state for the Data Connector section.

    Owns the form fields, the database type options fetched from the
    backend, and the single message shown after each action.
    """

    def __init__(
        self,
        types_url: str,
        save_url: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        load_types: bool = True,
    ):
        self.types_url = types_url
        self.save_url = save_url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.form = ConnectionForm()
        self.database_options: list[str] = []
        self.loading = False
        self.error: str | None = None
        self.message: str | None = None
        self.show_message = False
        self.section = DEFAULT_SECTION
        self._sequence = RequestSequence()
        if load_types:
            self.load_database_types()

    def _show(self, message: str) -> None:
        self.message = message
        self.show_message = True

    def close_message(self) -> None:
        self.show_message = False
        self.message = None

    def select_section(self, name: str) -> None:
        if name not in SECTIONS:
            raise ValueError(f"unknown section: {name}")
        self.section = name

    def set_field(self, name: str, value: str) -> None:
        if name not in dict(FIELD_LABELS):
            raise ValueError(f"unknown connection field: {name}")
        setattr(self.form, name, value)

    def load_database_types(self, failure_prefix: str = "Failed to load database types") -> str | None:
        """Fetch the type list; return a failure reason, or None on success."""
        token = self._sequence.issue(TYPES_KEY)
        self.loading = True
        self.error = None
        try:
            ids = decode_database_types(get_json(self.session, self.types_url, self.timeout))
        except DecodeError as exc:
            reason = describe_error(exc)
            error = reason
        except FetchError as exc:
            reason = describe_error(exc)
            error = f"{failure_prefix}: {reason}"
        else:
            if self._sequence.is_current(TYPES_KEY, token):
                self.database_options = ids
                if ids:
                    self.form.database_type = ids[0]
                self.loading = False
            return None

        logger.warning("%s: %s", failure_prefix, reason)
        if self._sequence.is_current(TYPES_KEY, token):
            self.error = error
            self.loading = False
        return reason

    def validate(self) -> int:
        if self.form.missing_fields():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        port = str(self.form.port).strip()
        # plain ASCII numerals only
        if not (port.isascii() and port.lstrip("-").isdigit()):
            raise ValidationError(INVALID_PORT_MESSAGE)
        return int(port)

    def submit(self) -> bool:
        try:
            port = self.validate()
        except ValidationError as exc:
            self._show(str(exc))
            return False

        self._show(SAVING_MESSAGE)
        payload = self.form.to_payload(port)
        try:
            body = post_json(self.session, self.save_url, payload, self.timeout)
        except FetchError as exc:
            logger.error("Error saving database connection details: %s", exc)
            if exc.status_code == 500:
                self._show(SERVER_ERROR_MESSAGE)
            else:
                self._show(f"Error saving database connection details: {describe_error(exc)}")
            return False
        except DecodeError as exc:
            logger.error("Error saving database connection details: %s", exc)
            self._show(f"Error saving database connection details: {describe_error(exc)}")
            return False

        if isinstance(body, dict) and body.get("success"):
            self._show(f"Connection details saved successfully: {body.get('message', '')}")
            return True
        reason = body.get("message") if isinstance(body, dict) else None
        self._show(f"Failed to save connection details: {reason or 'Unknown error'}")
        return False

    def refresh(self) -> bool:
        self.form.clear()
        reason = self.load_database_types("Failed to refresh database types")
        if reason is None:
            self._show(REFRESHED_MESSAGE)
            return True
        self._show(f"Failed to refresh: {reason}")
        return False

    def reconnect(self) -> bool:
        self._show(RECONNECT_MESSAGE)
        return self.submit()


def collect(configurator: ConnectionConfigurator) -> PanelData:
    form = configurator.form
    items = [
        {"field": name, "label": label, "value": str(getattr(form, name))}
        for name, label in FIELD_LABELS
    ]
    status = "warn" if configurator.error else "ok"
    return PanelData(
        key="configuration",
        title="Data Connection Configuration",
        status=status,
        items=items,
        meta={
            "section": configurator.section,
            "sections": dict(SECTIONS),
            "database_options": list(configurator.database_options),
            "loading": configurator.loading,
            "message": configurator.message if configurator.show_message else None,
        },
        errors=[configurator.error] if configurator.error else [],
    )

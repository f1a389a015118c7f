"""Closed error taxonomy for recap rendering, with German user-facing messages."""

from __future__ import annotations

from enum import Enum


class RecapErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    EMPTY_INPUT = "empty_input"
    NO_ELIGIBLE_MEDIA = "no_eligible_media"
    MALFORMED_RESPONSE = "malformed_response"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    REQUEST_TIMEOUT = "request_timeout"
    REMOTE_FAILURE = "remote_failure"
    POLL_TIMEOUT = "poll_timeout"
    CANCELLED = "cancelled"
    UNKNOWN_ERROR = "unknown_error"


# kind → (short message, default details)
_MESSAGES: dict[RecapErrorKind, tuple[str, str]] = {
    RecapErrorKind.MISSING_CREDENTIAL: (
        "API-Schlüssel fehlt",
        "Bitte gib einen gültigen Shotstack API-Schlüssel ein",
    ),
    RecapErrorKind.EMPTY_INPUT: (
        "Keine Medien verfügbar",
        "Es wurden keine Bilder oder Videos zum Erstellen des Recaps gefunden",
    ),
    RecapErrorKind.NO_ELIGIBLE_MEDIA: (
        "Keine geeigneten Medien",
        "Nach Anwendung der Filter sind keine Medien für das Recap verfügbar",
    ),
    RecapErrorKind.MALFORMED_RESPONSE: (
        "Ungültige API-Antwort",
        "Shotstack API hat keine Render-ID zurückgegeben",
    ),
    RecapErrorKind.BAD_REQUEST: (
        "Bad Request - Ungültige Anfrage",
        "Die Shotstack API hat die Anfrage abgelehnt. "
        "Überprüfe deine Medien-URLs und API-Einstellungen.",
    ),
    RecapErrorKind.UNAUTHORIZED: (
        "Unauthorized - Ungültiger API-Schlüssel",
        "Der API-Schlüssel ist ungültig oder abgelaufen. "
        "Überprüfe deinen Shotstack API-Schlüssel.",
    ),
    RecapErrorKind.RATE_LIMITED: (
        "Rate Limit erreicht",
        "Zu viele Anfragen. Warte einen Moment und versuche es erneut.",
    ),
    RecapErrorKind.REQUEST_TIMEOUT: (
        "Timeout",
        "Die Anfrage an Shotstack hat zu lange gedauert. Versuche es erneut.",
    ),
    RecapErrorKind.REMOTE_FAILURE: (
        "Rendering fehlgeschlagen",
        "Das Rendering ist ohne genaue Fehlermeldung fehlgeschlagen.",
    ),
    RecapErrorKind.POLL_TIMEOUT: (
        "Render-Timeout",
        "Die Video-Erstellung dauerte zu lange.",
    ),
    RecapErrorKind.CANCELLED: (
        "Abgebrochen",
        "Das Warten auf das Recap-Video wurde abgebrochen.",
    ),
    RecapErrorKind.UNKNOWN_ERROR: (
        "Unbekannter Fehler",
        "Ein unerwarteter Fehler ist aufgetreten.",
    ),
}


def default_message(kind: RecapErrorKind) -> str:
    return _MESSAGES[kind][0]


def default_details(kind: RecapErrorKind) -> str:
    return _MESSAGES[kind][1]


class RecapError(Exception):
    """A recap failure with a stable kind code and localized text.

    *details* falls back to the default text for the kind when the remote
    service supplied nothing more specific.
    """

    def __init__(self, kind: RecapErrorKind, details: str | None = None):
        self.kind = kind
        self.message = default_message(kind)
        self.details = details or default_details(kind)
        super().__init__(f"{self.message}: {self.details}")

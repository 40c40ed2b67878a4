"""
BananaMoney Lite — Session Fault Classification

Errors coming out of mineflayer are sorted into kinds at the adapter
boundary, so callers never match on message text themselves:

    IGNORABLE   — known mineflayer defects, logged and dropped
    PROTOCOL    — client/protocol errors reported by mineflayer
    UNEXPECTED  — anything else
"""

from __future__ import annotations

import asyncio
import logging
import re
import sys
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from src.session.chat import chat_text

log = logging.getLogger(__name__)


class FaultKind(Enum):
    IGNORABLE = auto()
    PROTOCOL = auto()
    UNEXPECTED = auto()


@dataclass(frozen=True)
class FaultSignature:
    """Identifies a known fault by JS error name and message pattern."""
    kind: FaultKind
    pattern: re.Pattern
    error_name: str = ""  # "" matches any error name
    description: str = ""

    def matches(self, name: str, message: str) -> bool:
        if self.error_name and self.error_name != name:
            return False
        return self.pattern.search(message) is not None


# Checked in order, first match wins.
KNOWN_FAULTS: list[FaultSignature] = [
    FaultSignature(
        FaultKind.IGNORABLE,
        re.compile(r"\bpassengers\b"),
        description="set_passengers packet for an unknown vehicle",
    ),
    FaultSignature(
        FaultKind.IGNORABLE,
        re.compile(r"Cannot read propert(y|ies) of undefined"),
        description="entity metadata for an entity that was never spawned",
    ),
    FaultSignature(
        FaultKind.PROTOCOL,
        re.compile(r"ECONNRESET|ECONNREFUSED|ETIMEDOUT|EPIPE|socket", re.IGNORECASE),
        description="network failure",
    ),
    FaultSignature(
        FaultKind.PROTOCOL,
        re.compile(r""),
        error_name="PartialReadError",
        description="packet decode failure",
    ),
    FaultSignature(
        FaultKind.PROTOCOL,
        re.compile(r"Chunk size|Deserializ|Serializ", re.IGNORECASE),
        description="packet decode failure",
    ),
]


@dataclass(frozen=True)
class SessionFault:
    kind: FaultKind
    name: str
    message: str

    @property
    def ignorable(self) -> bool:
        return self.kind is FaultKind.IGNORABLE

    def __str__(self) -> str:
        if self.name:
            return f"{self.name}: {self.message}"
        return self.message


class SessionError(Exception):
    """A failed call into the game session."""

    def __init__(self, fault: SessionFault):
        super().__init__(str(fault))
        self.fault = fault


def _error_parts(err: Any) -> tuple[str, str]:
    """Pull (name, message) out of a Python exception or a JS error proxy."""
    if isinstance(err, str):
        return "", err
    if isinstance(err, BaseException):
        # javascript.errors.JavaScriptError keeps the JS error on .js
        js = getattr(err, "js", None)
        if js is not None and not isinstance(js, str):
            return _error_parts(js)
        return type(err).__name__, str(err)

    name = message = None
    try:
        name = getattr(err, "name", None)
        message = getattr(err, "message", None)
    except Exception:
        pass
    return str(name or ""), str(message if message is not None else err)


def classify_error(err: Any) -> SessionFault:
    """Map an error (exception, JS error proxy, or message) to a SessionFault."""
    name, message = _error_parts(err)
    for sig in KNOWN_FAULTS:
        if sig.matches(name, message):
            return SessionFault(sig.kind, name, message)
    return SessionFault(FaultKind.UNEXPECTED, name, message)


def report_fault(fault: SessionFault, context: str = "Error") -> None:
    """Log a fault at the level its kind calls for."""
    if fault.ignorable:
        log.warning("Mineflayer bug caught (ignored): %s", fault.message)
    else:
        log.error("%s: %s", context, fault)


# ---- Kick reasons ----

def describe_kick_reason(reason: Any) -> str:
    """Turn a kick reason (JSON text, chat component, or plain text) into text."""
    return chat_text(reason) or "unknown reason"


# ---- Process-wide handlers ----

def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    if exc is None:
        log.error("Unhandled error in event loop: %s", context.get("message"))
        return
    report_fault(classify_error(exc), "Unhandled error")


def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
    if issubclass(args.exc_type, SystemExit):
        return
    report_fault(classify_error(args.exc_value), "Uncaught exception")


def _sys_excepthook(exc_type, exc_value, exc_tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    fault = classify_error(exc_value)
    report_fault(fault, "Uncaught exception")
    if not fault.ignorable:
        log.debug("traceback", exc_info=(exc_type, exc_value, exc_tb))


def install_fault_handlers(loop: asyncio.AbstractEventLoop | None = None) -> None:
    """Log and swallow errors nobody else handled; the process keeps running."""
    if loop is not None:
        loop.set_exception_handler(_loop_exception_handler)
    threading.excepthook = _thread_excepthook
    sys.excepthook = _sys_excepthook

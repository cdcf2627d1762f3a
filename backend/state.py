"""Application state shared by every request, injected through dependencies."""

from dataclasses import dataclass

from fastapi import Request

from backend.ai.analyzer import RoomAnalyzer
from ledger.usage import UsageLedger


@dataclass
class AppState:
    ledger: UsageLedger
    analyzer: RoomAnalyzer


def get_app_state(request: Request) -> AppState:
    return request.app.state.declutter


def get_ledger(request: Request) -> UsageLedger:
    return get_app_state(request).ledger


def get_analyzer(request: Request) -> RoomAnalyzer:
    return get_app_state(request).analyzer

"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from cashlens.config import Settings, settings
from cashlens.domain.rules import RuleSet
from cashlens.infrastructure.clients.sheet import SheetClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    """Provide application settings"""
    return settings


def get_rules(app_settings: Settings = Depends(get_settings)) -> RuleSet:
    """Provide the classification rule set built from settings"""
    return RuleSet.from_settings(app_settings)


def get_sheet_client() -> SheetClient:
    """Provide spreadsheet store client instance"""
    return SheetClient()

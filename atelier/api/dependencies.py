"""Dependency injection for API routes.

The app holds one Components instance built at startup; routes reach
the engine through these dependencies so tests can swap the wiring.
"""

from typing import Annotated

from fastapi import Depends, Request

from atelier.bootstrap import Components
from atelier.engine import TurnEngine


def get_components(request: Request) -> Components:
    """Components attached to the running app."""
    return request.app.state.components


def get_engine(components: Annotated[Components, Depends(get_components)]) -> TurnEngine:
    return components.engine


ComponentsDep = Annotated[Components, Depends(get_components)]
EngineDep = Annotated[TurnEngine, Depends(get_engine)]

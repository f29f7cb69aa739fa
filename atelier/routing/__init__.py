"""Intent detection and routing."""

from atelier.routing.classifier import IntentClassifier
from atelier.routing.router import IntentRouter, RouteDecision

__all__ = ["IntentClassifier", "IntentRouter", "RouteDecision"]

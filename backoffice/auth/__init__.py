"""
Authentication readiness and session lifecycle
"""
from .gate import AuthReadinessGate, GateState
from .session import AuthSession

__all__ = [
    "AuthReadinessGate",
    "AuthSession",
    "GateState",
]

"""
Request dependencies
"""

from fastapi import Request

from backoffice.container import BackOffice


def get_backoffice(request: Request) -> BackOffice:
    return request.app.state.backoffice

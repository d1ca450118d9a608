"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends, Request

from avatarvoice.domain_service import AvatarRepository


def get_repository(request: Request) -> AvatarRepository:
    """Get the repository owned by the running application."""
    return request.app.state.repository


# Type aliases for dependency injection
RepositoryDep = Annotated[AvatarRepository, Depends(get_repository)]

"""Avatar endpoints."""

from fastapi import APIRouter, status

from avatarvoice.app.dependencies import RepositoryDep
from avatarvoice.app.schemas import (
    AvatarCreateRequest,
    AvatarResponse,
    AvatarUpdateRequest,
    DeleteAllResponse,
    decode_payload,
)
from avatarvoice.domain.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    RepositoryStateError,
)

router = APIRouter(prefix="/api/v1/avatars", tags=["avatars"])


@router.get("", response_model=list[AvatarResponse])
async def list_avatars(repository: RepositoryDep) -> list[AvatarResponse]:
    return [AvatarResponse.from_avatar(avatar) for avatar in repository.avatars]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AvatarResponse)
async def create_avatar(
    request: AvatarCreateRequest, repository: RepositoryDep
) -> AvatarResponse:
    image_path = None
    if request.image_data is not None:
        image = decode_payload(request.image_data)
        image_path = await repository.save_avatar_image(image, request.image_file_name)

    try:
        avatar = await repository.add_avatar(
            request.name,
            icon=request.icon,
            color=request.color,
            image_path=image_path,
        )
    except (InvalidArgumentError, PersistenceError, RepositoryStateError):
        if image_path is not None:
            await repository.discard_blobs([image_path], "unsaved avatar image")
        raise
    return AvatarResponse.from_avatar(avatar)


@router.delete("", response_model=DeleteAllResponse)
async def delete_all_avatars(repository: RepositoryDep) -> DeleteAllResponse:
    removed = await repository.delete_all()
    return DeleteAllResponse(removed=removed)


@router.get("/{avatar_id}", response_model=AvatarResponse)
async def get_avatar(avatar_id: str, repository: RepositoryDep) -> AvatarResponse:
    return AvatarResponse.from_avatar(repository.get_avatar(avatar_id))


@router.patch("/{avatar_id}", response_model=AvatarResponse)
async def update_avatar(
    avatar_id: str, request: AvatarUpdateRequest, repository: RepositoryDep
) -> AvatarResponse:
    repository.get_avatar(avatar_id)

    image_path = None
    if request.image_data is not None and not request.clear_image:
        image = decode_payload(request.image_data)
        image_path = await repository.save_avatar_image(image, request.image_file_name)

    try:
        avatar = await repository.update_avatar(
            avatar_id,
            name=request.name,
            color=request.color,
            icon=request.icon,
            image_path=image_path,
            clear_image=request.clear_image,
        )
    except (InvalidArgumentError, NotFoundError, PersistenceError, RepositoryStateError):
        if image_path is not None:
            await repository.discard_blobs([image_path], "unsaved avatar image")
        raise
    return AvatarResponse.from_avatar(avatar)


@router.delete("/{avatar_id}", response_model=AvatarResponse)
async def delete_avatar(avatar_id: str, repository: RepositoryDep) -> AvatarResponse:
    avatar = await repository.remove_avatar(avatar_id)
    return AvatarResponse.from_avatar(avatar)


@router.put("/selection/{avatar_id}", response_model=AvatarResponse)
async def select_avatar(avatar_id: str, repository: RepositoryDep) -> AvatarResponse:
    avatar = repository.select_avatar(avatar_id)
    assert avatar is not None
    return AvatarResponse.from_avatar(avatar)

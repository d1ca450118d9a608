"""Voice endpoints."""

from datetime import timedelta

from fastapi import APIRouter, Response, status

from avatarvoice.app.dependencies import RepositoryDep
from avatarvoice.app.schemas import (
    AvatarResponse,
    ReorderRequest,
    VoiceCreateRequest,
    VoiceResponse,
    VoiceUpdateRequest,
    decode_payload,
)
from avatarvoice.domain.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/avatars/{avatar_id}/voices", tags=["voices"])


@router.get("", response_model=list[VoiceResponse])
async def list_voices(avatar_id: str, repository: RepositoryDep) -> list[VoiceResponse]:
    avatar = repository.get_avatar(avatar_id)
    return [VoiceResponse.from_voice(voice) for voice in avatar.voices]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=VoiceResponse)
async def create_voice(
    avatar_id: str, request: VoiceCreateRequest, repository: RepositoryDep
) -> VoiceResponse:
    audio = decode_payload(request.audio_data)
    voice = await repository.add_voice_from_bytes(
        avatar_id,
        request.name,
        audio,
        duration=timedelta(milliseconds=request.duration_ms),
        category=request.category,
        file_name=request.file_name,
        color=request.color,
    )
    return VoiceResponse.from_voice(voice)


@router.delete("", response_model=list[VoiceResponse])
async def delete_all_voices(
    avatar_id: str, repository: RepositoryDep
) -> list[VoiceResponse]:
    removed = await repository.remove_all_voices(avatar_id)
    return [VoiceResponse.from_voice(voice) for voice in removed]


@router.post("/reorder", response_model=AvatarResponse)
async def reorder_voices(
    avatar_id: str, request: ReorderRequest, repository: RepositoryDep
) -> AvatarResponse:
    avatar = await repository.reorder_voices(
        avatar_id, request.old_index, request.new_index
    )
    return AvatarResponse.from_avatar(avatar)


@router.patch("/{voice_id}", response_model=VoiceResponse)
async def update_voice(
    avatar_id: str,
    voice_id: str,
    request: VoiceUpdateRequest,
    repository: RepositoryDep,
) -> VoiceResponse:
    voice = await repository.update_voice(
        avatar_id,
        voice_id,
        name=request.name,
        category=request.category,
        color=request.color,
        clear_color=request.clear_color,
    )
    return VoiceResponse.from_voice(voice)


@router.delete("/{voice_id}", response_model=VoiceResponse)
async def delete_voice(
    avatar_id: str, voice_id: str, repository: RepositoryDep
) -> VoiceResponse:
    voice = await repository.remove_voice(avatar_id, voice_id)
    return VoiceResponse.from_voice(voice)


@router.post("/{voice_id}/play", response_model=VoiceResponse)
async def play_voice(
    avatar_id: str, voice_id: str, repository: RepositoryDep
) -> VoiceResponse:
    """Record one play of the voice."""
    voice = await repository.track_usage(avatar_id, voice_id)
    return VoiceResponse.from_voice(voice)


@router.post("/{voice_id}/reset-usage", response_model=VoiceResponse)
async def reset_voice_usage(
    avatar_id: str, voice_id: str, repository: RepositoryDep
) -> VoiceResponse:
    avatar = await repository.reset_usage(avatar_id, voice_id)
    voice = avatar.find_voice(voice_id)
    assert voice is not None
    return VoiceResponse.from_voice(voice)


@router.get("/{voice_id}/audio")
async def get_voice_audio(
    avatar_id: str, voice_id: str, repository: RepositoryDep
) -> Response:
    """Stream the stored audio bytes."""
    data = await repository.get_audio(avatar_id, voice_id)
    if data is None:
        raise NotFoundError("Audio", voice_id)
    return Response(content=data, media_type="application/octet-stream")

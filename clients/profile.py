"""Profile, skills and document uploads."""
from __future__ import annotations

import mimetypes
from pathlib import Path

import aiofiles

from clients.base import DomainClient
from clients.executor import CallClass
from jobsync.schemas import (
    AvatarUploadResponse,
    ResumeUploadResponse,
    SkillsResponse,
    UpdateProfileRequest,
    UserProfile,
)


class ProfileClient(DomainClient):
    async def get_profile(self) -> UserProfile:
        return await self._call(UserProfile, "/profile", requires_auth=True)

    async def update_profile(self, update: UpdateProfileRequest) -> UserProfile:
        return await self._call(UserProfile, "/profile", "PUT", update.to_wire(), requires_auth=True)

    async def upload_resume(self, path: Path) -> ResumeUploadResponse:
        return await self._upload(ResumeUploadResponse, "/profile/upload-resume", "resume", path)

    async def upload_avatar(self, path: Path) -> AvatarUploadResponse:
        return await self._upload(AvatarUploadResponse, "/profile/upload-avatar", "avatar", path)

    async def get_skills(self) -> SkillsResponse:
        return await self._call(SkillsResponse, "/profile/skills", requires_auth=True)

    async def update_skills(self, skills: list[str]) -> SkillsResponse:
        return await self._call(SkillsResponse, "/profile/skills", "PUT", {"skills": skills}, requires_auth=True)

    async def add_skill(self, skill: str) -> SkillsResponse:
        current = await self.get_skills()
        if skill in current.skills:
            return current
        return await self.update_skills([*current.skills, skill])

    async def remove_skill(self, skill: str) -> SkillsResponse:
        current = await self.get_skills()
        return await self.update_skills([s for s in current.skills if s != skill])

    async def _upload(self, schema, endpoint: str, field_name: str, path: Path):
        path = Path(path)
        async with aiofiles.open(path, "rb") as handle:
            content = await handle.read()
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return await self._call(
            schema,
            endpoint,
            "POST",
            files={field_name: (path.name, content, content_type)},
            requires_auth=True,
            call_class=CallClass.UPLOAD,
        )

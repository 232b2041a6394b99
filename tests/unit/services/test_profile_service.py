"""Unit tests for ProfileService."""

from uuid import uuid4

import pytest

from core.exceptions import ProfileUnavailableError, UsernameTakenError, ValidationError
from domain.entities.profile import Profile
from domain.services.profile_provisioning import ProfileProvisioningGuard
from domain.services.profile_service import ProfileService
from tests.unit.conftest import FakeUnitOfWork, InMemoryProfileRepository, make_identity


@pytest.fixture
def service(uow: FakeUnitOfWork, profile_store: InMemoryProfileRepository) -> ProfileService:
    uow.profiles = profile_store
    return ProfileService(lambda: uow, ProfileProvisioningGuard(lambda: uow))


class TestGetMe:
    @pytest.mark.asyncio
    async def test_first_access_provisions(
        self, service: ProfileService, profile_store: InMemoryProfileRepository
    ):
        identity = make_identity(full_name="Taro Yamada")

        profile = await service.get_me(identity)

        assert profile.username == "Taro Yamada"
        assert identity.id in profile_store.rows

    @pytest.mark.asyncio
    async def test_unavailable_when_guard_fails(
        self, service: ProfileService, profile_store: InMemoryProfileRepository
    ):
        profile_store.fail_inserts_with = "permission denied"

        with pytest.raises(ProfileUnavailableError):
            await service.get_me(make_identity(full_name="Taro"))


class TestUpdateUsername:
    @pytest.mark.asyncio
    async def test_renames_trimmed(
        self,
        service: ProfileService,
        profile_store: InMemoryProfileRepository,
        uow: FakeUnitOfWork,
    ):
        identity = make_identity(full_name="Taro")

        profile = await service.update_username(identity, "  taro_dev ")

        assert profile.username == "taro_dev"
        assert profile_store.rows[identity.id].username == "taro_dev"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_blank_is_rejected(self, service: ProfileService):
        with pytest.raises(ValidationError):
            await service.update_username(make_identity(), "   ")

    @pytest.mark.asyncio
    async def test_taken_by_someone_else(
        self, service: ProfileService, profile_store: InMemoryProfileRepository
    ):
        holder = uuid4()
        profile_store.rows[holder] = Profile(id=holder, username="hanako")

        with pytest.raises(UsernameTakenError):
            await service.update_username(make_identity(full_name="Taro"), "hanako")

    @pytest.mark.asyncio
    async def test_same_name_is_a_no_op(
        self, service: ProfileService, profile_store: InMemoryProfileRepository
    ):
        identity = make_identity(full_name="Taro")
        await service.get_me(identity)

        profile = await service.update_username(identity, "Taro")

        assert profile.username == "Taro"

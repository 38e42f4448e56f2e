"""Shared test fixtures."""

from collections.abc import Collection
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from babyshoot.adapters.astria_client import AstriaClient, AstriaError
from babyshoot.config import Settings
from babyshoot.containers import AppContainer
from babyshoot.domain.albums import (
    Album,
    AlbumImage,
    AlbumOrder,
    ShippingDetails,
)
from babyshoot.domain.children import Child, ChildProfile
from babyshoot.domain.credits import CreditPackage, CreditTransaction
from babyshoot.domain.images import GeneratedImage, ImageStatus, NewImage
from babyshoot.domain.models import AuthenticatedUser
from babyshoot.domain.sessions import NewSession, PhotoshootSession
from babyshoot.domain.themes import Theme, ThemePrompt
from babyshoot.services.albums import AlbumRepository, AlbumService, OrderRepository
from babyshoot.services.cache import InMemoryCache
from babyshoot.services.children import ChildRepository, ChildService
from babyshoot.services.credits import CreditRepository, CreditService
from babyshoot.services.dashboard import DashboardService
from babyshoot.services.photoshoots import (
    ImageRepository,
    PhotoshootService,
    SessionRepository,
)
from babyshoot.services.reconciliation import ImageStore, StatusReconciler
from babyshoot.services.themes import ThemeRepository, ThemeService
from babyshoot.services.users import AuthVerifier, UserRepository, UserService

USER_TOKEN = "user-access-token"
CRON_SECRET = "cron-secret"


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    rows: dict[UUID, dict[str, object]] = field(default_factory=dict)

    def upsert_user(
        self,
        user: AuthenticatedUser,
        first_name: str | None,
        last_name: str | None,
        image_url: str | None,
    ) -> None:
        self.rows[user.id] = {
            "email": user.email,
            "first_name": first_name,
            "last_name": last_name,
            "image_url": image_url,
        }


@dataclass
class FakeAuthVerifier(AuthVerifier):
    """Accepts a single known token."""

    user: AuthenticatedUser = field(
        default_factory=lambda: AuthenticatedUser(
            id=uuid4(),
            email="parent@example.com",
            metadata={"full_name": "Pat Parent"},
        )
    )
    token: str = USER_TOKEN

    def verify(self, access_token: str) -> AuthenticatedUser | None:
        return self.user if access_token == self.token else None


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[UUID, PhotoshootSession] = field(default_factory=dict)

    def add(self, **kwargs: object) -> PhotoshootSession:
        values: dict[str, object] = {
            "id": uuid4(),
            "user_id": uuid4(),
            "status": "pending",
            "created_at": _now(),
            "updated_at": _now(),
        }
        values.update(kwargs)
        session = PhotoshootSession(**values)  # type: ignore[arg-type]
        self.sessions[session.id] = session
        return session

    def create_session(self, session: NewSession) -> PhotoshootSession:
        return self.add(
            user_id=session.user_id,
            status=str(session.status),
            child_id=session.child_id,
            selected_theme_id=session.selected_theme_id,
            base_prompt=session.base_prompt,
            enhanced_prompt=session.enhanced_prompt,
            uploaded_photos=list(session.uploaded_photos),
            model_id=session.model_id,
            training_job_id=session.training_job_id,
            family_fingerprint=session.family_fingerprint,
        )

    def get_session(self, session_id: UUID) -> PhotoshootSession | None:
        return self.sessions.get(session_id)

    def get_user_session(
        self, session_id: UUID, user_id: UUID
    ) -> PhotoshootSession | None:
        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def list_user_sessions(self, user_id: UUID) -> list[PhotoshootSession]:
        found = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted(found, key=lambda s: s.created_at or _now(), reverse=True)

    def count_user_sessions(self, user_id: UUID, since: datetime | None = None) -> int:
        return sum(
            1
            for s in self.sessions.values()
            if s.user_id == user_id
            and (since is None or (s.created_at and s.created_at >= since))
        )

    def list_by_status(self, statuses: Collection[str]) -> list[PhotoshootSession]:
        wanted = {str(status) for status in statuses}
        return [s for s in self.sessions.values() if s.status in wanted]

    def list_by_training_job(self, training_job_id: str) -> list[PhotoshootSession]:
        return [
            s for s in self.sessions.values() if s.training_job_id == training_job_id
        ]

    def find_model_session(  # noqa: PLR0913
        self,
        user_id: UUID,
        *,
        session_id: UUID | None = None,
        child_id: UUID | None = None,
        family_fingerprint: str | None = None,
        updated_since: datetime | None = None,
    ) -> PhotoshootSession | None:
        candidates = [
            s
            for s in self.sessions.values()
            if s.user_id == user_id
            and s.status == "completed"
            and s.model_id
            and (session_id is None or s.id == session_id)
            and (child_id is None or s.child_id == child_id)
            and (
                family_fingerprint is None
                or s.family_fingerprint == family_fingerprint
            )
            and (
                updated_since is None
                or (s.updated_at is not None and s.updated_at >= updated_since)
            )
        ]
        candidates.sort(key=lambda s: s.updated_at or _now(), reverse=True)
        return candidates[0] if candidates else None

    def child_has_sessions(self, child_id: UUID) -> bool:
        return any(s.child_id == child_id for s in self.sessions.values())

    def update_session(self, session_id: UUID, changes: dict[str, object]) -> None:
        session = self.sessions[session_id]
        self.sessions[session_id] = replace(session, **changes, updated_at=_now())

    def transition_status(
        self,
        session_id: UUID,
        expected: Collection[str],
        status: str,
        changes: dict[str, object] | None = None,
    ) -> bool:
        session = self.sessions.get(session_id)
        if session is None or session.status not in {str(s) for s in expected}:
            return False
        self.sessions[session_id] = replace(
            session, **(changes or {}), status=str(status), updated_at=_now()
        )
        return True

    def delete_session(self, session_id: UUID) -> None:
        self.sessions.pop(session_id, None)


@dataclass
class InMemoryImageRepository(ImageRepository):
    """In-memory generated image repository for tests."""

    images: dict[UUID, GeneratedImage] = field(default_factory=dict)
    owners: dict[UUID, UUID] = field(default_factory=dict)

    def add(self, session_id: UUID, **kwargs: object) -> GeneratedImage:
        values: dict[str, object] = {
            "id": uuid4(),
            "session_id": session_id,
            "status": ImageStatus.GENERATING.value,
            "created_at": _now(),
        }
        values.update(kwargs)
        image = GeneratedImage(**values)  # type: ignore[arg-type]
        self.images[image.id] = image
        return image

    def create_images(self, images: list[NewImage]) -> list[GeneratedImage]:
        return [
            self.add(
                image.session_id,
                prompt=image.prompt,
                astria_prompt_id=image.astria_prompt_id,
                theme_prompt_id=image.theme_prompt_id,
            )
            for image in images
        ]

    def list_session_images(
        self, session_id: UUID, status: str | None = None
    ) -> list[GeneratedImage]:
        return [
            image
            for image in self.images.values()
            if image.session_id == session_id
            and (status is None or image.status == status)
        ]

    def find_generating_by_prompt(self, prompt_id: str) -> GeneratedImage | None:
        for image in self.images.values():
            if image.astria_prompt_id == prompt_id and image.status == "generating":
                return image
        return None

    def complete_image(
        self,
        image_id: UUID,
        image_url: str,
        astria_url: str,
        seed: int | None,
    ) -> bool:
        return self._finish(
            image_id,
            status="completed",
            image_url=image_url,
            thumbnail_url=image_url,
            astria_url=astria_url,
            seed=seed,
        )

    def fail_image(self, image_id: UUID) -> bool:
        return self._finish(image_id, status="failed")

    def _finish(self, image_id: UUID, **changes: object) -> bool:
        image = self.images.get(image_id)
        if image is None or image.status != "generating":
            return False
        self.images[image_id] = replace(image, **changes)  # type: ignore[arg-type]
        return True

    def delete_session_images(self, session_id: UUID) -> None:
        for image_id in [
            i.id for i in self.images.values() if i.session_id == session_id
        ]:
            del self.images[image_id]

    def list_user_images(self, user_id: UUID) -> list[GeneratedImage]:
        return [
            image
            for image in self.images.values()
            if self.owners.get(image.session_id) == user_id
            and image.status == "completed"
            and image.image_url
        ]

    def owned_image_ids(self, user_id: UUID, image_ids: list[UUID]) -> set[UUID]:
        return {
            image_id
            for image_id in image_ids
            if image_id in self.images
            and self.images[image_id].status == "completed"
            and self.owners.get(self.images[image_id].session_id) == user_id
        }


@dataclass
class InMemoryChildRepository(ChildRepository):
    """In-memory child repository for tests."""

    children: dict[UUID, Child] = field(default_factory=dict)

    def list_children(self, user_id: UUID) -> list[Child]:
        return [c for c in self.children.values() if c.user_id == user_id]

    def get_child(self, child_id: UUID, user_id: UUID) -> Child | None:
        child = self.children.get(child_id)
        return child if child and child.user_id == user_id else None

    def find_by_name(self, user_id: UUID, name: str) -> Child | None:
        for child in self.children.values():
            if child.user_id == user_id and child.profile.name == name:
                return child
        return None

    def create_child(self, user_id: UUID, profile: ChildProfile) -> Child:
        child = Child(id=uuid4(), user_id=user_id, profile=profile, created_at=_now())
        self.children[child.id] = child
        return child

    def delete_child(self, child_id: UUID) -> None:
        self.children.pop(child_id, None)


@dataclass
class InMemoryThemeRepository(ThemeRepository):
    """In-memory theme catalog for tests."""

    themes: dict[UUID, Theme] = field(default_factory=dict)
    list_calls: int = 0

    def add(self, **kwargs: object) -> Theme:
        values: dict[str, object] = {
            "id": uuid4(),
            "name": "Garden Party",
            "prompt": "in a sunny flower garden",
            "session_type": "both",
        }
        values.update(kwargs)
        theme = Theme(**values)  # type: ignore[arg-type]
        self.themes[theme.id] = theme
        return theme

    def list_active(self, session_types: list[str]) -> list[Theme]:
        self.list_calls += 1
        return [
            theme
            for theme in self.themes.values()
            if theme.is_active and theme.session_type in session_types
        ]

    def get_theme(self, theme_id: UUID) -> Theme | None:
        return self.themes.get(theme_id)


@dataclass
class InMemoryCreditRepository(CreditRepository):
    """In-memory credit ledger for tests."""

    balances: dict[UUID, int] = field(default_factory=dict)
    ledger: list[CreditTransaction] = field(default_factory=list)
    packages: list[CreditPackage] = field(default_factory=list)
    fail_modify: bool = False

    def get_balance(self, user_id: UUID) -> int:
        return self.balances.get(user_id, 0)

    def modify_credits(
        self,
        user_id: UUID,
        amount: int,
        transaction_type: str,
        description: str,
        session_id: UUID | None,
    ) -> None:
        if self.fail_modify:
            raise RuntimeError("rpc unavailable")
        self.balances[user_id] = self.balances.get(user_id, 0) + amount
        self.ledger.append(
            CreditTransaction(
                id=uuid4(),
                user_id=user_id,
                type=transaction_type,
                amount=amount,
                description=description,
                photoshoot_session_id=session_id,
                created_at=_now(),
            )
        )

    def list_transactions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[CreditTransaction]:
        rows = [t for t in reversed(self.ledger) if t.user_id == user_id]
        return rows[offset : offset + limit]

    def delete_session_transactions(self, session_id: UUID) -> None:
        self.ledger = [
            t for t in self.ledger if t.photoshoot_session_id != session_id
        ]

    def list_packages(self) -> list[CreditPackage]:
        return list(self.packages)


@dataclass
class InMemoryAlbumRepository(AlbumRepository):
    """In-memory album repository for tests."""

    albums: dict[UUID, Album] = field(default_factory=dict)
    slots: dict[UUID, list[AlbumImage]] = field(default_factory=dict)

    def _with_images(self, album: Album) -> Album:
        slots = sorted(self.slots.get(album.id, []), key=lambda s: s.position)
        return replace(album, images=slots, image_count=len(slots))

    def list_albums(self, user_id: UUID) -> list[Album]:
        return [
            self._with_images(a) for a in self.albums.values() if a.user_id == user_id
        ]

    def get_album(self, album_id: UUID, user_id: UUID) -> Album | None:
        album = self.albums.get(album_id)
        if album is None or album.user_id != user_id:
            return None
        return self._with_images(album)

    def create_album(self, user_id: UUID, title: str, description: str | None) -> Album:
        album = Album(id=uuid4(), user_id=user_id, title=title, description=description)
        self.albums[album.id] = album
        return album

    def update_album(self, album_id: UUID, changes: dict[str, object]) -> Album:
        album = replace(self.albums[album_id], **changes)  # type: ignore[arg-type]
        self.albums[album_id] = album
        return self._with_images(album)

    def max_position(self, album_id: UUID) -> int:
        return max((s.position for s in self.slots.get(album_id, [])), default=-1)

    def add_images(self, album_id: UUID, image_ids: list[UUID], start: int) -> int:
        slots = self.slots.setdefault(album_id, [])
        for offset, image_id in enumerate(image_ids):
            slots.append(
                AlbumImage(id=uuid4(), image_id=image_id, position=start + offset)
            )
        return len(image_ids)

    def remove_image(self, album_id: UUID, image_id: UUID) -> None:
        self.slots[album_id] = [
            s for s in self.slots.get(album_id, []) if s.image_id != image_id
        ]

    def count_images(self, album_id: UUID) -> int:
        return len(self.slots.get(album_id, []))


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository for tests."""

    orders: dict[UUID, AlbumOrder] = field(default_factory=dict)

    def create_order(  # noqa: PLR0913
        self,
        album_id: UUID,
        user_id: UUID,
        shipping: ShippingDetails,
        base_price: float,
        shipping_cost: float,
    ) -> AlbumOrder:
        order = AlbumOrder(
            id=uuid4(),
            album_id=album_id,
            user_id=user_id,
            shipping_name=shipping.name,
            shipping_address=shipping.address,
            album_size=shipping.album_size,
            cover_type=shipping.cover_type,
            base_price=base_price,
            shipping_cost=shipping_cost,
            total_amount=shipping.total_amount,
        )
        self.orders[order.id] = order
        return order

    def list_orders(self, user_id: UUID) -> list[AlbumOrder]:
        return [o for o in self.orders.values() if o.user_id == user_id]

    def get_order(self, order_id: UUID, user_id: UUID) -> AlbumOrder | None:
        order = self.orders.get(order_id)
        return order if order and order.user_id == user_id else None


@dataclass
class FakeAstriaClient(AstriaClient):
    """Fake Astria client with scripted tune and prompt states."""

    tunes: dict[str, dict[str, object]] = field(default_factory=dict)
    prompts: dict[str, dict[str, object]] = field(default_factory=dict)
    created_tunes: list[dict[str, object]] = field(default_factory=list)
    created_prompts: list[dict[str, object]] = field(default_factory=list)
    fail_create_tune: bool = False
    fail_create_prompt_after: int | None = None
    failing_prompt_ids: set[str] = field(default_factory=set)
    _next_id: int = 1000

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def create_tune(
        self, title: str, class_name: str, image_urls: list[str]
    ) -> dict[str, object]:
        if self.fail_create_tune:
            raise AstriaError("Astria create_tune failed with status 500")
        tune = {"id": self._id(), "title": title, "name": class_name}
        self.created_tunes.append({**tune, "image_urls": image_urls})
        return tune

    async def get_tune(self, tune_id: str) -> dict[str, object]:
        return self.tunes.get(tune_id, {"id": tune_id})

    async def create_prompt(
        self, tune_id: str, text: str, num_images: int = 1
    ) -> dict[str, object]:
        if (
            self.fail_create_prompt_after is not None
            and len(self.created_prompts) >= self.fail_create_prompt_after
        ):
            raise AstriaError("Astria create_prompt failed with status 500")
        prompt = {"id": self._id(), "text": text, "num_images": num_images}
        self.created_prompts.append({**prompt, "tune_id": tune_id})
        return prompt

    async def get_prompt(self, tune_id: str, prompt_id: str) -> dict[str, object]:
        if prompt_id in self.failing_prompt_ids:
            raise AstriaError("Astria get_prompt failed with status 502")
        return self.prompts.get(prompt_id, {"id": prompt_id, "images": []})


@dataclass
class FakeImageStore(ImageStore):
    """Pretends to copy images into storage."""

    stored: list[tuple[str, UUID, UUID]] = field(default_factory=list)
    fail: bool = False

    async def store(
        self, source_url: str, session_id: UUID, image_id: UUID
    ) -> str | None:
        if self.fail:
            return None
        self.stored.append((source_url, session_id, image_id))
        return f"https://storage.example/sessions/{session_id}/{image_id}.jpg"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        astria_api_key="astria-key",
        cron_secret=CRON_SECRET,
        internal_api_key="internal-key",
    )


@pytest.fixture
def auth_verifier() -> FakeAuthVerifier:
    return FakeAuthVerifier()


@pytest.fixture
def user(auth_verifier: FakeAuthVerifier) -> AuthenticatedUser:
    return auth_verifier.user


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {USER_TOKEN}"}


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def image_repository() -> InMemoryImageRepository:
    return InMemoryImageRepository()


@pytest.fixture
def child_repository() -> InMemoryChildRepository:
    return InMemoryChildRepository()


@pytest.fixture
def theme_repository() -> InMemoryThemeRepository:
    return InMemoryThemeRepository()


@pytest.fixture
def credit_repository() -> InMemoryCreditRepository:
    return InMemoryCreditRepository()


@pytest.fixture
def astria_client() -> FakeAstriaClient:
    return FakeAstriaClient()


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def theme(theme_repository: InMemoryThemeRepository) -> Theme:
    return theme_repository.add(
        image_count=2,
        prompts=[
            ThemePrompt(id=uuid4(), prompt_text="on a picnic blanket", prompt_order=2),
            ThemePrompt(id=uuid4(), prompt_text="holding a sunflower", prompt_order=1),
            ThemePrompt(id=uuid4(), prompt_text="chasing butterflies", prompt_order=3),
        ],
    )


@pytest.fixture
def reconciler(
    session_repository: InMemorySessionRepository,
    image_repository: InMemoryImageRepository,
    astria_client: FakeAstriaClient,
    image_store: FakeImageStore,
) -> StatusReconciler:
    return StatusReconciler(
        session_repository=session_repository,
        image_repository=image_repository,
        astria_client=astria_client,
        image_store=image_store,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    auth_verifier: FakeAuthVerifier,
    session_repository: InMemorySessionRepository,
    image_repository: InMemoryImageRepository,
    child_repository: InMemoryChildRepository,
    theme_repository: InMemoryThemeRepository,
    credit_repository: InMemoryCreditRepository,
    astria_client: FakeAstriaClient,
    reconciler: StatusReconciler,
) -> AppContainer:
    cache = InMemoryCache()
    user_service = UserService(InMemoryUserRepository())
    credit_service = CreditService(credit_repository, cache)
    theme_service = ThemeService(theme_repository, cache)
    child_service = ChildService(
        repository=child_repository,
        session_repository=session_repository,
        credit_service=credit_service,
    )
    photoshoot_service = PhotoshootService(
        session_repository=session_repository,
        image_repository=image_repository,
        child_repository=child_repository,
        theme_service=theme_service,
        credit_service=credit_service,
        user_service=user_service,
        astria_client=astria_client,
    )
    album_service = AlbumService(
        repository=InMemoryAlbumRepository(),
        order_repository=InMemoryOrderRepository(),
        image_repository=image_repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_verifier=auth_verifier,
        user_service=user_service,
        credit_service=credit_service,
        theme_service=theme_service,
        child_service=child_service,
        photoshoot_service=photoshoot_service,
        reconciler=reconciler,
        album_service=album_service,
        dashboard_service=DashboardService(
            child_service=child_service,
            session_repository=session_repository,
            credit_service=credit_service,
        ),
        close_resources=close_resources,
    )

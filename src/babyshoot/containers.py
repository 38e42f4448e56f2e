"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from babyshoot.adapters.astria_client import HttpxAstriaClient
from babyshoot.adapters.supabase_album_repository import SupabaseAlbumRepository
from babyshoot.adapters.supabase_auth import SupabaseAuthVerifier
from babyshoot.adapters.supabase_child_repository import SupabaseChildRepository
from babyshoot.adapters.supabase_credit_repository import SupabaseCreditRepository
from babyshoot.adapters.supabase_image_repository import SupabaseImageRepository
from babyshoot.adapters.supabase_image_store import SupabaseImageStore
from babyshoot.adapters.supabase_order_repository import SupabaseOrderRepository
from babyshoot.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from babyshoot.adapters.supabase_theme_repository import SupabaseThemeRepository
from babyshoot.adapters.supabase_user_repository import SupabaseUserRepository
from babyshoot.config import Settings
from babyshoot.services.albums import AlbumService
from babyshoot.services.cache import InMemoryCache
from babyshoot.services.children import ChildService
from babyshoot.services.credits import CreditService
from babyshoot.services.dashboard import DashboardService
from babyshoot.services.photoshoots import PhotoshootService
from babyshoot.services.reconciliation import StatusReconciler
from babyshoot.services.themes import ThemeService
from babyshoot.services.users import AuthVerifier, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_verifier: AuthVerifier
    user_service: UserService
    credit_service: CreditService
    theme_service: ThemeService
    child_service: ChildService
    photoshoot_service: PhotoshootService
    reconciler: StatusReconciler
    album_service: AlbumService
    dashboard_service: DashboardService
    close_resources: Callable[[], Awaitable[None]]
    prepare_resources: Callable[[], None] | None = None


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    image_repository = SupabaseImageRepository(supabase_client)
    child_repository = SupabaseChildRepository(supabase_client)
    cache = InMemoryCache()
    user_service = UserService(SupabaseUserRepository(supabase_client))
    credit_service = CreditService(SupabaseCreditRepository(supabase_client), cache)
    theme_service = ThemeService(SupabaseThemeRepository(supabase_client), cache)
    astria_client = HttpxAstriaClient.create(
        api_key=resolved_settings.astria_api_key,
        base_url=resolved_settings.astria_base_url,
        base_tune_id=resolved_settings.astria_base_tune_id,
        model_type=resolved_settings.astria_model_type,
        token=resolved_settings.astria_token,
        callback_base_url=resolved_settings.public_base_url,
        webhook_secret=resolved_settings.astria_webhook_secret,
    )
    image_store = SupabaseImageStore.create(
        supabase_client, resolved_settings.storage_bucket
    )
    child_service = ChildService(
        repository=child_repository,
        session_repository=session_repository,
        credit_service=credit_service,
        model_reuse_days=resolved_settings.model_reuse_days,
    )
    photoshoot_service = PhotoshootService(
        session_repository=session_repository,
        image_repository=image_repository,
        child_repository=child_repository,
        theme_service=theme_service,
        credit_service=credit_service,
        user_service=user_service,
        astria_client=astria_client,
        trigger_token=resolved_settings.astria_token,
        class_name=resolved_settings.astria_class_name,
        model_reuse_days=resolved_settings.model_reuse_days,
    )
    reconciler = StatusReconciler(
        session_repository=session_repository,
        image_repository=image_repository,
        astria_client=astria_client,
        image_store=image_store if resolved_settings.store_generated_images else None,
    )
    album_service = AlbumService(
        repository=SupabaseAlbumRepository(supabase_client),
        order_repository=SupabaseOrderRepository(supabase_client),
        image_repository=image_repository,
    )
    dashboard_service = DashboardService(
        child_service=child_service,
        session_repository=session_repository,
        credit_service=credit_service,
    )

    def prepare_resources() -> None:
        if resolved_settings.store_generated_images:
            image_store.ensure_bucket()

    async def close_resources() -> None:
        await astria_client.close()
        await image_store.close()

    return AppContainer(
        settings=resolved_settings,
        auth_verifier=SupabaseAuthVerifier(supabase_client),
        user_service=user_service,
        credit_service=credit_service,
        theme_service=theme_service,
        child_service=child_service,
        photoshoot_service=photoshoot_service,
        reconciler=reconciler,
        album_service=album_service,
        dashboard_service=dashboard_service,
        close_resources=close_resources,
        prepare_resources=prepare_resources,
    )

from fastapi import FastAPI, Request

from .background import BackgroundRunner
from .config import Settings
from .infrastructure.backends import KeyValueBackend, MemoryBackend, RedisBackend
from .infrastructure.lookup_store import LookupStore
from .infrastructure.realtime_cache import RealtimeLookupCache
from .infrastructure.veriphone import VeriphoneClient
from .posts import PostLoader
from .resolver import LookupResolver


def build_backend(settings: Settings) -> KeyValueBackend:
    if settings.use_redis:
        return RedisBackend(settings.redis_url)
    return MemoryBackend()


def build_resolver(settings: Settings) -> LookupResolver:
    """Construct the lookup pipeline and its long-lived clients."""
    runner = BackgroundRunner()
    cache = RealtimeLookupCache(
        build_backend(settings),
        path_prefix=settings.realtime_cache_path,
        ttl_seconds=settings.cache_ttl_seconds,
        runner=runner,
    )
    store = LookupStore(settings.store_url)
    provider = VeriphoneClient(settings)
    return LookupResolver(
        cache,
        store,
        provider,
        default_region=settings.default_region,
        runner=runner,
    )


async def close_resolver(resolver: LookupResolver) -> None:
    await resolver.drain()
    await resolver.cache.backend.close()
    resolver.store.dispose()
    resolver.provider.close()


def init_app(app: FastAPI, settings: Settings) -> None:
    """Create and store shared dependencies on the application."""
    app.state.settings = settings
    app.state.resolver = build_resolver(settings)
    app.state.post_loader = PostLoader(settings.posts_dir)


def get_resolver(request: Request) -> LookupResolver:
    return request.app.state.resolver


def get_post_loader(request: Request) -> PostLoader:
    return request.app.state.post_loader

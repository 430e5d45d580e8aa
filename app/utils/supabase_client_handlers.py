from supabase import acreate_client, AsyncClient
from app.configs.app_settings import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# one AsyncClient per process:
# - the lifespan awaits create_supabase_client() before the bookings subscription opens its realtime channel
# - routes receive the same instance through the get_supabase_client dependency
# - on shutdown close_supabase_client() drops any realtime channel still attached, then forgets the client


_supabase_client: Optional[AsyncClient] = None


async def create_supabase_client() -> AsyncClient:
    """Build the shared async client; later calls return the existing one"""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        logger.info(f"Supabase client created for {settings.SUPABASE_URL}")
    return _supabase_client


async def get_supabase_client() -> AsyncClient:
    """Dependency returning the shared client"""
    if _supabase_client is None:
        raise RuntimeError("Supabase client not initialized. Call create_supabase_client() during startup.")
    return _supabase_client


async def close_supabase_client():
    """Remove leftover realtime channels and reset the shared client"""
    global _supabase_client
    client, _supabase_client = _supabase_client, None
    if client is None:
        return
    try:
        # the bookings subscription removes its own channel first; this catches anything left behind
        await client.remove_all_channels()
    except Exception as e:
        logger.warning(f"Error removing realtime channels on shutdown: {str(e)}")

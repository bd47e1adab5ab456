from .supabase_client import SupabaseService, get_supabase_client

__all__ = ["SupabaseService", "get_supabase_client"]

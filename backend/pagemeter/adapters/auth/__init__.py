"""Auth adapters: Supabase JWT verification, a static verifier and a fake."""

from pagemeter.adapters.auth.fake import FakeAuthVerifier
from pagemeter.adapters.auth.static import StaticAuthVerifier
from pagemeter.adapters.auth.supabase import SupabaseJwtVerifier

__all__ = ["FakeAuthVerifier", "StaticAuthVerifier", "SupabaseJwtVerifier"]

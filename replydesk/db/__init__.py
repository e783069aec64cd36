"""Database clients for ReplyDesk."""

from replydesk.db.supabase import MessageStore, SupabaseClient, get_message_store

__all__ = ["MessageStore", "SupabaseClient", "get_message_store"]

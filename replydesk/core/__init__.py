"""Core module for ReplyDesk configuration and utilities."""

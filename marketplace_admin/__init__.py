"""Marketplace admin API: price automation rules and digital stock entry."""

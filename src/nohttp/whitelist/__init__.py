"""Whitelist loading and matching."""

from nohttp.whitelist.loader import load_whitelist, load_whitelist_from_string
from nohttp.whitelist.matcher import WhitelistMatcher, is_whitelisted
from nohttp.whitelist.models import Whitelist, WhitelistEntry

__all__ = [
    "Whitelist",
    "WhitelistEntry",
    "WhitelistMatcher",
    "is_whitelisted",
    "load_whitelist",
    "load_whitelist_from_string",
]

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Config:
    search_base_url: str = "https://itunes.apple.com/search"
    country: str = "US"
    page_size: int = 50
    max_attempts: int = 5
    default_term: str = "Top 100"
    request_timeout_s: float = 15.0

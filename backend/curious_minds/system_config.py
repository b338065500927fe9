"""Branding and limits singleton with its built-in defaults."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_SET_LIMIT, MATH_LEVEL_IDS, STAGE_IDS

SYSTEM_CONFIG_ID = "global"

DEFAULT_REGISTRY_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbwV6MJV5YcXJMKy0ZgoB4qrZ1Rz50V24CIvPeZye186gn-bmS9EMWkkvfDgalI94_sr0g/exec"
)

# Image fields always come from the defaults, whatever is stored.
_FIXED_IMAGE_FIELDS = ("math_image_url", "telugu_image_url", "prompt_image_url")


class SystemConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    logo_url: str = "https://lh3.googleusercontent.com/d/1wlXkesZA-6CPevQRDL4JH1fz8aE5UzKf"
    custom_title: str = "Curious Minds"
    welcome_message: str = "Welcome to your daily learning companion"
    primary_color: str = "#4F46E5"
    secondary_color: str = "#1e1b4b"
    accent_color: str = "#10B981"
    google_sheets_url: Optional[str] = DEFAULT_REGISTRY_URL
    math_limits: Dict[str, int] = Field(default_factory=lambda: {key: DEFAULT_SET_LIMIT for key in MATH_LEVEL_IDS})
    telugu_limits: Dict[str, int] = Field(default_factory=lambda: {key: DEFAULT_SET_LIMIT for key in STAGE_IDS})
    math_image_url: str = (
        "https://images.unsplash.com/photo-1509062522246-3755977927d7?auto=format&fit=crop&q=80&w=1200"
    )
    telugu_image_url: str = (
        "https://images.unsplash.com/photo-1503676260728-1c00da094a0b?auto=format&fit=crop&q=80&w=1200"
    )
    prompt_image_url: str = (
        "https://images.unsplash.com/photo-1677442136019-21780ecad995?auto=format&fit=crop&q=80&w=1200"
    )
    enabled_telugu_stages: List[str] = Field(default_factory=lambda: list(STAGE_IDS))

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


DEFAULT_SYSTEM_CONFIG = SystemConfig()


def merge_with_defaults(stored: Optional[Mapping[str, Any]]) -> SystemConfig:
    """Overlay a stored payload (camel or snake keys) on the defaults."""
    payload = DEFAULT_SYSTEM_CONFIG.model_dump()
    if stored:
        for name in SystemConfig.model_fields:
            if name in _FIXED_IMAGE_FIELDS:
                continue
            for key in (to_camel(name), name):
                if stored.get(key) is not None:
                    payload[name] = stored[key]
                    break
    return SystemConfig.model_validate(payload)


__all__ = [
    "DEFAULT_SYSTEM_CONFIG",
    "SYSTEM_CONFIG_ID",
    "SystemConfig",
    "merge_with_defaults",
]

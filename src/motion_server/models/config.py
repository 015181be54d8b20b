"""
Configuration data models for the motion-server file server.

This module defines the immutable configuration that is built once at startup
and handed to the HTTP layer: the music folder, the optional backgrounds and
client bundle folders, network settings and the media classification rules.
"""

import os
from typing import Dict, List, Optional, Any
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_AUDIO_EXTENSIONS = ["mp3", "flac", "m4a", "aac", "ogg", "wav", "m3u", "m3u8"]
DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "webp", "avif", "png", "gif", "bmp"]
DEFAULT_SUBTITLE_EXTENSIONS = ["vtt", "srt"]
DEFAULT_COVER_PATTERNS = ["cover", "folder", "front"]


def _normalize_extensions(v: Any) -> List[str]:
    if isinstance(v, str):
        v = [v]
    if not isinstance(v, list):
        raise ValueError(f"Extensions must be a list of strings, got {type(v).__name__}")

    normalized = []
    for ext in v:
        ext = str(ext).strip().lower().lstrip('.')
        if not ext:
            continue
        if ext not in normalized:
            normalized.append(ext)
    return normalized


def _normalize_path(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    if not str(v).strip():
        return None
    return os.path.abspath(str(Path(str(v).strip()).expanduser()))


class MediaConfig(BaseModel):
    """
    Rules for classifying directory entries as media.

    Attributes:
        audio_extensions: Extensions listed as playable files
        image_extensions: Extensions considered for cover art
        subtitle_extensions: Extensions of subtitle/lyrics tracks served alongside audio
        cover_patterns: Name patterns tried in priority order when picking a cover
        show_hidden: Whether dotfiles are included in directory listings
    """

    model_config = ConfigDict(frozen=True)

    audio_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_AUDIO_EXTENSIONS),
        description="Extensions listed as playable files"
    )
    image_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS),
        description="Extensions considered for cover art"
    )
    subtitle_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SUBTITLE_EXTENSIONS),
        description="Extensions of subtitle tracks"
    )
    cover_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COVER_PATTERNS),
        description="Cover image name patterns, highest priority first"
    )
    show_hidden: bool = Field(False, description="Whether dotfiles are included in listings")

    @field_validator('audio_extensions', 'image_extensions', 'subtitle_extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v) -> List[str]:
        """Lowercase extensions and strip any leading dot."""
        return _normalize_extensions(v)

    @field_validator('audio_extensions', 'image_extensions')
    @classmethod
    def validate_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("At least one extension must be specified")
        return v

    @field_validator('cover_patterns', mode='before')
    @classmethod
    def validate_cover_patterns(cls, v) -> List[str]:
        """Drop blank patterns while keeping the configured priority order."""
        if isinstance(v, str):
            v = [v]
        return [str(p).strip() for p in v if p and str(p).strip()]

    def servable_extensions(self) -> List[str]:
        """Extensions that may be sent to the client as raw files."""
        return self.audio_extensions + self.image_extensions + self.subtitle_extensions

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ServerConfig(BaseModel):
    """
    Main configuration for the file server.

    Instances are immutable: the CLI builds one before the server starts and
    the application factory receives it explicitly.

    Attributes:
        music_path: Folder exposed under /music; when unset, request paths are absolute
        backgrounds_path: Optional folder with background images and videos
        public_path: Optional folder holding the web client bundle
        port: TCP port to listen on
        host: Interface to bind when external connections are not allowed
        allow_external: Accept connections from other machines
        launch_client: Open the client in a browser after startup
        media: Media classification rules
    """

    model_config = ConfigDict(frozen=True)

    music_path: Optional[str] = Field(None, description="Folder exposed under /music")
    backgrounds_path: Optional[str] = Field(None, description="Folder with background images and videos")
    public_path: Optional[str] = Field(None, description="Folder holding the web client bundle")
    port: int = Field(8000, ge=1, le=65535, description="TCP port to listen on")
    host: str = Field("localhost", description="Interface to bind for local-only connections")
    allow_external: bool = Field(False, description="Accept connections from other machines")
    launch_client: bool = Field(True, description="Open the client in a browser after startup")
    media: MediaConfig = Field(default_factory=MediaConfig, description="Media classification rules")

    @field_validator('music_path', 'backgrounds_path', 'public_path', mode='before')
    @classmethod
    def validate_paths(cls, v) -> Optional[str]:
        """Expand user paths and make them absolute."""
        return _normalize_path(v)

    @field_validator('host')
    @classmethod
    def validate_host(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Host cannot be empty")
        return v.strip()

    @model_validator(mode='after')
    def validate_folders(self):
        """Check that configured folders can actually be read."""
        for name in ('music_path', 'backgrounds_path', 'public_path'):
            value = getattr(self, name)
            if value is None:
                continue
            path = Path(value)
            if not path.is_dir():
                raise ValueError(f"{name} is not a directory: {value}")
            if not os.access(value, os.R_OK):
                raise ValueError(f"No read access to {name} at {value}")
        return self

    @property
    def bind_host(self) -> str:
        """Interface actually passed to the HTTP server."""
        return "0.0.0.0" if self.allow_external else self.host

    @property
    def client_url(self) -> str:
        return f"http://localhost:{self.port}"

    def validate_configuration(self) -> List[str]:
        """
        Collect non-fatal warnings about the configuration.

        Returns:
            List of warning messages
        """
        warnings = []

        if self.allow_external:
            warnings.append("External connections are allowed - the served folders are visible on the network")

        if self.music_path is None:
            warnings.append("No music folder configured - request paths are resolved against the whole filesystem")

        if self.public_path is None:
            warnings.append("No client bundle folder configured - only the API routes will be served")

        overlap = set(self.media.audio_extensions) & set(self.media.image_extensions)
        if overlap:
            warnings.append(f"Extensions listed as both audio and image: {sorted(overlap)}")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['media'] = self.media.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServerConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Music: {self.music_path or '(filesystem)'}"]
        parts.append(f"Listen: {self.bind_host}:{self.port}")
        if self.backgrounds_path:
            parts.append(f"Backgrounds: {self.backgrounds_path}")
        parts.append(f"Launch client: {self.launch_client}")

        return " | ".join(parts)

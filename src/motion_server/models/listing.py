"""
Directory listing and playlist data models for motion-server.

These are transient, per-request structures: a listing is built from one
directory read and discarded once it has been serialized for the client.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator


class DirectoryListing(BaseModel):
    """
    Contents of a single directory as sent to the client.

    Attributes:
        dirs: Subdirectory names in collation order
        files: File names in collation order
        cover: Name of the selected cover image, if any
    """

    dirs: List[str] = Field(default_factory=list, description="Subdirectory names")
    files: List[str] = Field(default_factory=list, description="File names")
    cover: Optional[str] = Field(None, description="Selected cover image")

    @model_validator(mode='after')
    def validate_unique_names(self):
        """Names are unique within one listing."""
        for label, names in (('dirs', self.dirs), ('files', self.files)):
            if len(set(names)) != len(names):
                raise ValueError(f"Duplicate names in {label}")
        return self

    def is_empty(self) -> bool:
        return not self.dirs and not self.files

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape expected by the client, omitting an absent cover."""
        data = {'dirs': list(self.dirs), 'files': list(self.files)}
        if self.cover is not None:
            data['cover'] = self.cover
        return data


class PlaylistEntry(BaseModel):
    """
    One track of a playlist posted by the client.

    Attributes:
        file: Path or URL of the track
        artist: Artist name shown in the #EXTINF line
        title: Track title; entries without a title get no #EXTINF line
        duration: Track length as 'hh:mm:ss', 'mm:ss' or 'LIVE'
    """

    file: str = Field(..., min_length=1, description="Path or URL of the track")
    artist: Optional[str] = Field(None, description="Artist name")
    title: Optional[str] = Field(None, description="Track title")
    duration: Optional[str] = Field(None, description="Track length")

    @field_validator('duration', mode='before')
    @classmethod
    def validate_duration(cls, v) -> Optional[str]:
        """Accept numeric durations from the client as plain seconds."""
        if v is None or v == '':
            return None
        if isinstance(v, (int, float)):
            if v != v or v in (float('inf'), float('-inf')):
                return 'LIVE'
            return str(int(v))
        return str(v)


class SaveResult(BaseModel):
    """Outcome of a playlist save: either the written file or an error message."""

    file: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {'file': self.file} if self.ok else {'error': self.error}

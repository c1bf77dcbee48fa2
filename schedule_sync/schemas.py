from pydantic import BaseModel, Field


class SyncResponse(BaseModel):
    """Summary of one completed reconciliation run"""
    status: str
    timestamp: str
    source: str
    started_at: str
    completed_at: str
    duration_seconds: float
    feed_channels: int
    feed_programmes: int
    channels_resolved: int
    channels_unresolved: list[str] = Field(default_factory=list)
    programmes_seen: int
    programmes_malformed: int
    programmes_unmapped: int
    programmes_unchanged: int
    programmes_unmatched: int
    windows_replaced: int
    programmes_deleted: int
    programmes_inserted: int
    new_slots_inserted: int
    diagnostics: dict[str, int] = Field(default_factory=dict, description="Diagnostic kind -> count")


class HealthResponse(BaseModel):
    """Service health"""
    status: str
    sync_running: bool

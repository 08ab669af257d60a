"""
Progress event schema for CSV uploads
"""
from typing import List, Optional
from pydantic import BaseModel, Field

# Event name used by transports that multiplex several event kinds on one channel.
CSV_UPLOAD_PROGRESS_EVENT = "csv-upload-progress"


class ProgressEvent(BaseModel):
    """
    Snapshot of an upload's progress.

    errors is a copy taken at emission time; the last event of an upload has
    completed=True and, normally, a success_message.
    """
    upload_id: str
    progress: int = Field(..., ge=0, le=100, description="Percent complete")
    current_item: str
    total_items: int
    processed_items: int
    errors: List[str] = Field(default_factory=list)
    completed: bool = False
    success_message: Optional[str] = None

    # Batch fields, only set on batch start/end events
    batch_processing: Optional[bool] = None
    current_batch: Optional[int] = None
    total_batches: Optional[int] = None
    batch_size: Optional[int] = None

"""
Application event models reported to the notification engine.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SystemEventType(str, Enum):
    """Kinds of application-level events."""
    IMPORT = "import"
    EXPORT = "export"
    BACKUP = "backup"
    SYNC = "sync"
    ERROR = "error"


class SystemEvent(BaseModel):
    """
    An import/export/backup/sync outcome or a system error.

    Attributes:
        type: Event kind
        message: Main message text
        success: Whether the operation succeeded
        details: Optional text appended to the message
    """

    type: SystemEventType
    message: str
    success: bool = False
    details: Optional[str] = Field(default=None)

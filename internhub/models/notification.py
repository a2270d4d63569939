from typing import Literal
from pydantic import BaseModel


class Notification(BaseModel):
    """Dismissible message shown to the end user."""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"

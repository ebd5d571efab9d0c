"""Transport-independent replies produced by the conversation flows."""

from typing import List

from pydantic import BaseModel

from services.formatting import MAX_MESSAGE_LENGTH, split_message


class Button(BaseModel):
    """An inline button: a display label and the callback token it sends."""
    label: str
    data: str


class Reply(BaseModel):
    """What the bot should answer to a single inbound event."""
    text: str
    buttons: List[List[Button]] = []
    show_menu: bool = False

    def chunks(self, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
        """Splits the text into ordered messages no longer than ``limit``."""
        return split_message(self.text, limit)

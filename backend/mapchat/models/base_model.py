from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from enum import Enum

NEAR_ME = "near me"

# --- Enums ---
class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

# --- Domain Models ---
class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

class LocationIntent(BaseModel):
    """Structured search parameters extracted from one user utterance"""
    query: str
    location: str = NEAR_ME
    formatted_query: str

    @classmethod
    def fallback(cls, utterance: str) -> "LocationIntent":
        """Treat the raw utterance as the search string"""
        return cls(query=utterance, location=NEAR_ME, formatted_query=utterance)

# --- API Request Models ---
class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., description="Conversation history, oldest first")
    userLocation: Optional[Coordinates] = Field(None, description="Caller origin used for distances")

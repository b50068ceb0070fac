"""
Chat Router
Planning conversations: each user message runs the planning workflow
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tobugo.core.deps import get_services, get_storage
from tobugo.core.security import get_current_user_id
from tobugo.models.chat import ChatSession, ConversationTurn
from tobugo.models.common import APIResponse

router = APIRouter(prefix="/chat", tags=["Chat"])


class CreateSessionRequest(BaseModel):
    trip_id: str | None = None


class MessageRequest(BaseModel):
    message: str = Field(..., description="The user's chat message")
    auto_generate: bool = Field(
        default=True, description="Generate and save an itinerary once preferences are complete"
    )


def session_to_wire(session: ChatSession) -> dict:
    return session.model_dump(mode="json", by_alias=True)


async def _owned_session(session_id: str, user_id: str, storage) -> ChatSession:
    session = await storage.get_chat_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    if session.user_id and session.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not your chat session")
    return session


@router.post("", status_code=201, response_model=APIResponse)
async def create_session(
    body: CreateSessionRequest,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    if body.trip_id is not None:
        trip = await storage.get_trip(body.trip_id)
        if trip is None:
            raise HTTPException(status_code=404, detail="Trip not found")
        if trip.user_id != user_id:
            raise HTTPException(status_code=403, detail="Not your trip")
    session = await storage.create_chat_session(ChatSession(user_id=user_id, trip_id=body.trip_id))
    print(f"[chat] Created session {session.id} for user {user_id}")
    return APIResponse(code=0, msg="created", data=session_to_wire(session))


@router.get("/user/{user_id}", response_model=APIResponse)
async def list_sessions(
    user_id: str,
    current_user: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    if user_id != current_user:
        raise HTTPException(status_code=403, detail="Cannot list another user's sessions")
    sessions = await storage.list_chat_sessions_by_user(user_id)
    return APIResponse(code=0, msg="ok", data=[session_to_wire(s) for s in sessions])


@router.get("/{session_id}", response_model=APIResponse)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    storage=Depends(get_storage),
):
    session = await _owned_session(session_id, user_id, storage)
    return APIResponse(code=0, msg="ok", data=session_to_wire(session))


@router.post("/{session_id}/message", response_model=APIResponse)
async def send_message(
    session_id: str,
    body: MessageRequest,
    user_id: str = Depends(get_current_user_id),
    services=Depends(get_services),
):
    """
    Append the user's message, let the assistant answer, and, once the
    conversation has enough detail, generate and save the itinerary.
    """
    content = body.message.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message must not be empty")

    storage = services.storage
    session = await _owned_session(session_id, user_id, storage)
    history = [*session.messages, ConversationTurn(role="user", content=content)]

    result = await services.workflow.run(
        {
            "session_id": session.id,
            "user_id": user_id,
            "trip_id": session.trip_id,
            "history": history,
            "preferences": session.preferences,
            "auto_generate": body.auto_generate,
        }
    )
    agent_data = result.get("agent_data", {}) or {}

    history.append(ConversationTurn(role="assistant", content=agent_data["reply"]))
    ready = bool(agent_data.get("ready"))
    updates = {
        "messages": history,
        "preferences": agent_data["preferences"],
        "status": "completed" if ready else "active",
    }
    if agent_data.get("trip_id"):
        updates["trip_id"] = agent_data["trip_id"]
    updated = await storage.update_chat_session(session.id, updates)

    itinerary = agent_data.get("itinerary")
    return APIResponse(
        code=0,
        msg="ok",
        data={
            "session": session_to_wire(updated),
            "shouldGenerateItinerary": ready,
            "extractedPreferences": agent_data["preferences"].to_wire(),
            "itinerary": itinerary.to_wire() if itinerary is not None else None,
            "tripId": agent_data.get("trip_id"),
            "error": agent_data.get("error"),
        },
    )

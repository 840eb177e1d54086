import json
from typing import List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, Field

from app.core.database import get_db
from app.core.errors import ok
from app.chat import groups
from app.chat.manager import RoomManager, get_room_manager

router = APIRouter(tags=["Chat"])

# ==================== MODELS ====================

class GroupCreate(BaseModel):
    group_name: str = Field(..., alias="groupName")
    members: List[str] = []

    class Config:
        populate_by_name = True


class MessageCreate(BaseModel):
    group_id: int = Field(..., alias="groupId")
    sender: str
    content: str

    class Config:
        populate_by_name = True


def event(name: str, data) -> dict:
    return {"event": name, "data": jsonable_encoder(data)}

# ==================== GROUPS ====================

@router.post("/creategroup", status_code=201)
async def create_group(data: GroupCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    group = await groups.create_group(db, data.group_name, data.members)
    return ok("Group Created", group)


@router.post("/sendmessage")
async def send_message(
    data: MessageCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    rooms: RoomManager = Depends(get_room_manager),
):
    """
    Store a message in the group history, then push it to the group's live
    room. The push is best effort and happens after the write.
    """
    message = await groups.append_message(db, data.group_id, data.sender, data.content)
    room = str(data.group_id)
    delivered = await rooms.publish(room, event("receive_message", {"room": room, "groupId": data.group_id, **message}))
    return ok("Message Sent", {"message": message, "delivered": delivered})


@router.get("/groups/{group_id}")
async def get_group(group_id: int, db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Group", await groups.get_group(db, group_id))


@router.get("/groups/member/{member}")
async def get_member_groups(member: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Groups", await groups.list_groups_for(db, member))

# ==================== REALTIME ====================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, rooms: RoomManager = Depends(get_room_manager)):
    """
    Client frames:
        {"event": "join_room", "data": "<room>"}
        {"event": "send_message", "data": {"room": "<room>", ...}}
    Every member of the room, sender included, gets
        {"event": "receive_message", "data": {...}}
    """
    await websocket.accept()
    connection_id = await rooms.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            try:
                frame = json.loads(raw)
                name, data = frame.get("event"), frame.get("data")
            except (TypeError, ValueError, AttributeError):
                # Binary frames arrive without text
                await websocket.send_json(event("error", "Invalid frame"))
                continue

            if name == "join_room" and isinstance(data, str) and data:
                await rooms.join(connection_id, data)
            elif name == "leave_room" and isinstance(data, str) and data:
                await rooms.leave(connection_id, data)
            elif name == "send_message" and isinstance(data, dict) and data.get("room"):
                await rooms.publish(str(data["room"]), event("receive_message", data))
            else:
                await websocket.send_json(event("error", f"Unknown or malformed event: {name}"))
    except WebSocketDisconnect:
        pass
    finally:
        await rooms.disconnect(connection_id)

from __future__ import annotations

import asyncio
import logging
import random
import secrets
import string
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from . import ai
from .config import TableConfig
from .errors import IllegalActionError, Reason
from .game import Action, ActionResult, Phase, TrumpSwapGame

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

settings = TableConfig.from_env()

app = FastAPI(title="Trump Swap")

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@dataclass
class Room:
    id: str
    game: TrumpSwapGame
    bot_rng: random.Random = field(default_factory=random.Random)
    host_id: Optional[str] = None
    connections: Dict[str, WebSocket] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    bot_task: Optional[asyncio.Task] = None

    @property
    def config(self) -> TableConfig:
        return self.game.config

    def drop_connection(self, seat_id: str) -> None:
        self.connections.pop(seat_id, None)
        if self.host_id == seat_id:
            self.host_id = next(iter(self.connections), None)


def room_id() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(6))


def new_room(config: Optional[TableConfig] = None) -> Room:
    config = config or settings
    rid = room_id()
    while rid in rooms:
        rid = room_id()
    seed = config.random_seed
    room = Room(
        id=rid,
        game=TrumpSwapGame(config),
        bot_rng=random.Random(seed + 1 if seed is not None else None),
    )
    rooms[rid] = room
    logger.info("Created room %s", rid)
    return room


rooms: Dict[str, Room] = {}


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/room/{room_id}")
async def room_page(room_id: str) -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html")


@app.post("/api/rooms")
async def create_room() -> JSONResponse:
    room = new_room()
    return JSONResponse({"room_id": room.id})


@app.get("/api/rooms/{room_id}/state")
async def room_state(room_id: str) -> JSONResponse:
    room = rooms.get(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Unknown room")
    return JSONResponse(room_view(room, None))


@app.websocket("/ws/{room_id}")
async def room_socket(websocket: WebSocket, room_id: str, name: Optional[str] = None) -> None:
    room = rooms.get(room_id)
    if not room:
        await websocket.close(code=1008)
        return

    await websocket.accept()

    async with room.lock:
        try:
            seat = room.game.add_human(name or "Player")
        except IllegalActionError as exc:
            await websocket.send_json(error_message(exc.reason.value, exc.message))
            await websocket.close(code=1008)
            return
        room.connections[seat.id] = websocket
        if not room.host_id:
            room.host_id = seat.id

    await broadcast_state(room)

    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                await websocket.send_json(
                    error_message(Reason.UNKNOWN_ACTION.value, "Messages must be JSON objects.")
                )
                continue
            async with room.lock:
                before_plays = len(room.game.state.trick.plays)
                before = dict(room.connections)
                result = handle_message(room, seat.id, data)
                if result.ok:
                    schedule_bots(room, bot_delay(room, before_plays))
            if not result.ok:
                await websocket.send_json(error_message(result.reason, result.message))
                continue
            for sid, ws in before.items():
                if sid != seat.id and sid not in room.connections:
                    await ws.close()
            await broadcast_state(room)
            if seat.id not in room.connections:
                await websocket.close()
                return

    except WebSocketDisconnect:
        logger.info("Seat %s disconnected from room %s", seat.id, room.id)
    finally:
        async with room.lock:
            room.drop_connection(seat.id)
            room.game.disconnect(seat.id)
            schedule_bots(room, room.config.bot_delay)
        await broadcast_state(room)


def handle_message(room: Room, seat_id: str, data: Any) -> ActionResult:
    game = room.game
    if not isinstance(data, dict):
        return ActionResult(False, Reason.UNKNOWN_ACTION.value, "Messages must be JSON objects.")
    kind = data.get("type")
    try:
        if kind == "action":
            return game.apply_action(seat_id, Action.from_dict(data.get("action") or {}))
        if kind == "start_hand":
            return game.start_hand()
        if kind == "add_bot":
            require_host(room, seat_id)
            game.add_bot()
        elif kind == "remove_seat":
            target = data.get("seat_id") or seat_id
            if target != seat_id:
                require_host(room, seat_id)
            game.remove_seat(target)
            room.drop_connection(target)
        elif kind == "reset":
            require_host(room, seat_id)
            game.reset_table()
        else:
            raise IllegalActionError(Reason.UNKNOWN_ACTION, f"Unknown message: {kind!r}")
    except IllegalActionError as exc:
        logger.info("Room %s rejected %s from %s: %s", room.id, kind, seat_id, exc.reason.value)
        return ActionResult(False, exc.reason.value, exc.message)
    return ActionResult(True)


def require_host(room: Room, seat_id: str) -> None:
    if seat_id != room.host_id:
        raise IllegalActionError(Reason.NOT_HOST, "Only the host can do that.")


def error_message(reason: Optional[str], message: Optional[str]) -> Dict[str, Any]:
    return {"type": "error", "reason": reason, "message": message}


def room_view(room: Room, seat_id: Optional[str]) -> Dict[str, Any]:
    state = room.game.snapshot(seat_id)
    state.update(
        {
            "room_id": room.id,
            "host_id": room.host_id,
            "max_seats": room.config.max_seats,
            "can_start": room.game.phase == Phase.WAITING and seat_id is not None,
        }
    )
    return state


async def send_state(room: Room, seat_id: str) -> None:
    ws = room.connections.get(seat_id)
    if not ws:
        return
    await ws.send_json({"type": "state", "state": room_view(room, seat_id)})


async def broadcast_state(room: Room) -> None:
    for sid in list(room.connections.keys()):
        await send_state(room, sid)


def bot_delay(room: Room, before_plays: int) -> float:
    # Leave a finished trick on the table a little longer.
    game = room.game
    if before_plays and not game.state.trick.plays:
        return room.config.trick_pause
    return room.config.bot_delay


def schedule_bots(room: Room, delay: float) -> None:
    current = room.game.current_seat
    if current is None or not current.is_bot:
        return

    task = room.bot_task
    if task and not task.done() and task is not asyncio.current_task():
        task.cancel()

    async def _runner() -> None:
        await asyncio.sleep(max(0.0, delay))
        async with room.lock:
            advance_bots(room)
        await broadcast_state(room)

    room.bot_task = asyncio.create_task(_runner())


def advance_bots(room: Room) -> None:
    game = room.game
    if game.phase == Phase.WAITING:
        return

    current = game.current_seat
    if current is None or not current.is_bot:
        return

    before_plays = len(game.state.trick.plays)
    ai.take_turn(game, current.id, room.bot_rng)
    schedule_bots(room, bot_delay(room, before_plays))


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Trump Swap server running at http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()

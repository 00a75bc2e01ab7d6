"""
Ship agent.

Answers one command per turn for the space-combat/collection game: reads the
field snapshot, runs the decision pipeline and replies with M/L/R/F.

Usage:
    python agent.py --port 8080
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from fastapi import FastAPI
from pydantic import BaseModel
import uvicorn

from ship_core.pipeline import DecisionPipeline
from ship_core.session import SessionStore

ACTION_LOG_EVERY = 20


class MoveRequest(BaseModel):
    field: List[List[Optional[str]]]
    narrowingIn: int = 0
    gameId: int = 0


class MoveResponse(BaseModel):
    move: str


class ShipAgent:
    def __init__(self, name: str = "ShipAgent", grid_size: Optional[int] = None, max_sessions: int = 256):
        self.name = name
        self.pipeline = DecisionPipeline(grid_size=grid_size, name=name)
        self.sessions = SessionStore(max_sessions=max_sessions)
        self.decisions_served = 0

        print(f"[{self.name}] online")

    def get_move(self, field: List[List[Optional[str]]], narrowing_in: int, game_id: int) -> MoveResponse:
        history = self.sessions.get(game_id)
        decision = self.pipeline.decide(field, narrowing_in, history)
        history.record(decision.command)
        self.decisions_served += 1

        if ACTION_LOG_EVERY > 0 and history.turns % ACTION_LOG_EVERY == 0:
            print(
                f"[{self.name}] game={game_id} turn={history.turns} stage={decision.stage} "
                f"move={decision.command.value} score={decision.score:.2f} narrowing={narrowing_in} "
                f"recent={''.join(command.value for command in history.recent())}"
            )

        return MoveResponse(move=decision.command.value)


app = FastAPI(title="Ship Agent", version="1.0.0")
agent = ShipAgent()


@app.get("/")
async def root():
    return {
        "message": f"Agent {agent.name} is running",
        "decisions": agent.decisions_served,
        "sessions": len(agent.sessions),
    }


@app.get("/healthz")
async def healthz():
    return {"status": "OK"}


@app.post("/move", response_model=MoveResponse)
async def move(request: MoveRequest):
    return agent.get_move(
        field=request.field,
        narrowing_in=request.narrowingIn,
        game_id=request.gameId,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the ship decision agent")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--name", type=str, default=None)
    parser.add_argument("--grid-size", type=int, default=None, help="Reject fields of any other size")
    parser.add_argument("--max-sessions", type=int, default=256)
    args = parser.parse_args()

    agent = ShipAgent(
        name=args.name or f"ShipAgent_{args.port}",
        grid_size=args.grid_size,
        max_sessions=args.max_sessions,
    )

    print(f"Starting {agent.name} on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning", access_log=False)

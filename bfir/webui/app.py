from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from bfir.instructions import Instruction, format_program, program_to_dicts
from bfir.parser import UnbalancedLoopError, find_close, parse, parse_iterative

from .store import ProgramRecord, ProgramStore, new_program_id


def _parse_or_422(code: str, *, iterative: bool = False) -> List[Instruction]:
    parse_fn = parse_iterative if iterative else parse
    try:
        return parse_fn(code)
    except UnbalancedLoopError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "position": exc.position},
        ) from exc
    except RecursionError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Loops nested too deeply; retry with iterative=true", "position": None},
        ) from exc


def _json_or_422(content: Dict[str, Any], status_code: int = status.HTTP_200_OK) -> JSONResponse:
    # Plain json.dumps: pydantic's response serializer rejects deeply nested bodies.
    try:
        return JSONResponse(content=content, status_code=status_code)
    except (RecursionError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "IR nested too deeply to serialize", "position": None},
        ) from exc


def _program_content(instructions: List[Instruction]) -> Dict[str, Any]:
    try:
        data = program_to_dicts(instructions)
    except RecursionError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "IR nested too deeply to serialize", "position": None},
        ) from exc
    return {"instructions": data, "rendered": format_program(instructions)}


class ParseRequest(BaseModel):
    code: str
    iterative: bool = False


class ParseResponse(BaseModel):
    instructions: List[Dict[str, Any]]
    rendered: str
    count: int


class MatchRequest(BaseModel):
    code: str
    open_index: int = Field(ge=0)


class MatchResponse(BaseModel):
    open_index: int
    close_index: Optional[int] = None


class ProgramRequest(BaseModel):
    code: str
    iterative: bool = False


class ProgramPayload(BaseModel):
    program_id: str
    code: str
    instructions: List[Dict[str, Any]]
    rendered: str


def create_app(store: Optional[ProgramStore] = None) -> FastAPI:
    program_store = store if store is not None else ProgramStore()
    app = FastAPI(title="bfir Parser API", version="0.1.0")

    def _build_payload(record: ProgramRecord, status_code: int = status.HTTP_200_OK) -> JSONResponse:
        content = {"program_id": record.program_id, "code": record.code}
        content.update(_program_content(record.instructions))
        return _json_or_422(content, status_code)

    def _get_record(program_id: str) -> ProgramRecord:
        try:
            return program_store.get(program_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc

    @app.post("/api/parse", response_model=ParseResponse)
    def parse_source(payload: ParseRequest) -> JSONResponse:
        instructions = _parse_or_422(payload.code, iterative=payload.iterative)
        content = _program_content(instructions)
        content["count"] = len(instructions)
        return _json_or_422(content)

    @app.post("/api/match", response_model=MatchResponse)
    def match_bracket(payload: MatchRequest) -> MatchResponse:
        try:
            close_index = find_close(payload.code, payload.open_index)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return MatchResponse(open_index=payload.open_index, close_index=close_index)

    @app.post("/api/programs", response_model=ProgramPayload, status_code=status.HTTP_201_CREATED)
    def create_program(payload: ProgramRequest) -> JSONResponse:
        instructions = _parse_or_422(payload.code, iterative=payload.iterative)
        record = ProgramRecord(program_id=new_program_id(), code=payload.code, instructions=instructions)
        # The record is only stored once its response body has been built.
        response = _build_payload(record, status.HTTP_201_CREATED)
        program_store.put(record)
        return response

    @app.get("/api/programs/{program_id}", response_model=ProgramPayload)
    def get_program(program_id: str) -> JSONResponse:
        return _build_payload(_get_record(program_id))

    @app.delete("/api/programs/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_program(program_id: str) -> Response:
        removed = program_store.remove(program_id)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown program id: {program_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]

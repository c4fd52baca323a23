from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Request, Response

from mest_sim.domain.combatants import AttackMode
from mest_sim.sim.batch import run_attack_batch
from mest_sim.sim.rng import FaceSource, FaceSourceExhausted, RandomFaceSource, ScriptedFaceSource
from mest_sim.systems.combat import attack
from mest_sim.systems.resolver import resolve_test
from mest_server.api import mappers, schemas
from mest_server.session import EngineSession, get_or_create_session

router = APIRouter(prefix="/api")


def _face_source(session: EngineSession, faces: list[int] | None, seed: int | None) -> FaceSource:
    if faces is not None:
        return ScriptedFaceSource(faces)
    if seed is not None:
        return RandomFaceSource(seed=seed)
    return RandomFaceSource(session.rng)


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/modifiers", response_model=schemas.CatalogResponse)
async def get_modifiers(request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    return mappers.build_catalog_response(session.ruleset)


@router.post("/tests/resolve", response_model=schemas.TestOutcomeResponse)
async def resolve(payload: schemas.ResolveRequest, request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    async with session.lock:
        try:
            outcome = resolve_test(
                mappers.to_participant(payload.active),
                mappers.to_participant(payload.passive),
                payload.difficulty_rating,
                mappers.to_context(payload.context),
                faces=_face_source(session, payload.faces, payload.seed),
                ruleset=session.ruleset,
                telemetry=session.telemetry,
            )
        except (ValueError, FaceSourceExhausted) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return mappers.build_outcome_response(outcome)


@router.post("/combat/attack", response_model=schemas.AttackResponse)
async def combat_attack(payload: schemas.AttackRequest, request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    async with session.lock:
        try:
            result = attack(
                mappers.to_combatant(payload.attacker),
                mappers.to_combatant(payload.defender),
                mappers.to_weapon(payload.weapon),
                mappers.to_context(payload.context),
                faces=_face_source(session, payload.faces, payload.seed),
                mode=AttackMode(payload.mode),
                ruleset=session.ruleset,
                telemetry=session.telemetry,
            )
        except (ValueError, FaceSourceExhausted) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return mappers.build_attack_response(result)


@router.post("/batch/attack", response_model=schemas.BatchResponse)
async def batch_attack(payload: schemas.BatchRequest, request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    async with session.lock:
        try:
            report = await asyncio.to_thread(
                run_attack_batch,
                mappers.to_matchup(payload),
                payload.iterations,
                seed=payload.seed,
                workers=payload.workers,
                confidence=payload.confidence,
                ruleset=session.ruleset,
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        session.telemetry = session.telemetry.merge(report.telemetry)
        return mappers.build_batch_response(report)


@router.get("/telemetry", response_model=schemas.TelemetryResponse)
async def get_telemetry(request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    async with session.lock:
        return mappers.build_telemetry_response(session.telemetry)


@router.delete("/telemetry", response_model=schemas.ApiResponse)
async def reset_telemetry(request: Request, response: Response):
    session_id, session = get_or_create_session(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    async with session.lock:
        session.reset_telemetry()
        return schemas.ApiResponse(ok=True, message="Telemetry reset", message_kind="info")

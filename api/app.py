from __future__ import annotations
from dataclasses import asdict
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uuid, os, typing as t

# ---- Engine imports ----
import assessment_core.question_bank as qb
from assessment_core import config
from assessment_core.audit_bank import audit_items
from assessment_core.audit_export import to_json as audit_to_json, to_csv as audit_to_csv
from assessment_core.catalog import InMemoryCatalog
from assessment_core.engine import AssessmentSession, SelectionEngine
from assessment_core.gating import phase_for_count
from assessment_core.scoring import profile_from_mapping
from assessment_core.types import Item, SelectionInputError, SelectionSession

BANK: list[Item] = qb.load_bank()
CATALOG = InMemoryCatalog(BANK)
ENGINE = SelectionEngine(CATALOG)
SESS: dict[str, AssessmentSession] = {}

app = FastAPI(title="Adaptive Assessment API")


@app.get("/")
def root():
    return {"status": "ok", "service": "adaptive-assessment-api"}


ALLOWED_ORIGINS = [o for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    tier: str = "standard"   # "quick" | "standard" | "comprehensive"
    seed: int | None = None

class AnswerReq(BaseModel):
    item_id: str
    value: int
    rt_ms: int | None = None

class NextReq(BaseModel):
    count: int | None = None

class BaselineReq(BaseModel):
    tier: str

class AdaptiveReq(BaseModel):
    traits: dict[str, float]
    patterns: list[str] = Field(default_factory=list)
    dimensions: dict[str, float] = Field(default_factory=dict)
    exclude_ids: list[str] = Field(default_factory=list)
    total_count: int = config.ADAPTIVE_BATCH_SIZE
    items_answered: int | None = None
    phase: str | None = None

# ---- Helpers ----
def _serialize_item(it: Item) -> dict[str, t.Any]:
    return {
        "id": it.id,
        "text": it.text,
        "category": it.category,
        "instrument": it.instrument,
        "trait": it.trait,
        "facet": it.facet,
        "sensitivity": it.sensitivity.name,
    }


def _session(sid: str) -> AssessmentSession:
    sess = SESS.get(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess

# ---- Health ----
@app.get("/health")
def health():
    return {
        "items_active": CATALOG.count_active(),
        "batch_size": config.ADAPTIVE_BATCH_SIZE,
        "sessions": len(SESS),
    }

# ---- Session flow ----
@app.post("/session/start")
def start(req: StartReq):
    engine = ENGINE if req.seed is None else SelectionEngine(CATALOG, seed=req.seed)
    try:
        sess = AssessmentSession(tier=req.tier, engine=engine)
    except SelectionInputError as e:
        raise HTTPException(400, str(e))
    sid = str(uuid.uuid4())
    items = sess.start()
    SESS[sid] = sess
    return {"session_id": sid, "phase": sess.phase, "items": [_serialize_item(it) for it in items]}

@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    try:
        sess.answer(req.item_id, req.value, rt_ms=req.rt_ms)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"ok": True, "items_answered": sess.items_answered, "phase": sess.phase}

@app.post("/session/{sid}/next")
def next_batch(sid: str, req: NextReq | None = None):
    sess = _session(sid)
    count = req.count if req is not None else None
    try:
        items = sess.next_batch(count)
    except SelectionInputError as e:
        raise HTTPException(400, str(e))
    return {"done": not items, "phase": sess.phase, "items": [_serialize_item(it) for it in items]}

@app.get("/session/{sid}/profile")
def profile(sid: str):
    return _session(sid).to_dict()

@app.get("/session/{sid}/audit.json")
def session_audit_json(sid: str):
    if not config.AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    return {"session_id": sid, **audit_to_json(_session(sid).audit_events)}

@app.get("/session/{sid}/audit.csv")
def session_audit_csv(sid: str):
    if not config.AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    body = audit_to_csv(_session(sid).audit_events)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{sid}_audit.csv\""},
    )

@app.delete("/session/{sid}")
def end_session(sid: str):
    _session(sid)
    SESS.pop(sid, None)
    return {"ok": True}

# ---- Stateless selection ----
@app.post("/select/baseline")
def select_baseline(req: BaselineReq):
    try:
        items = ENGINE.select_baseline(req.tier)
    except SelectionInputError as e:
        raise HTTPException(400, str(e))
    return {"tier": req.tier, "items": [_serialize_item(it) for it in items]}

@app.post("/select/adaptive")
def select_adaptive(req: AdaptiveReq):
    exclude = frozenset(req.exclude_ids)
    answered = 0 if req.items_answered is None else req.items_answered
    session = SelectionSession(
        exclude_ids=exclude,
        items_answered=answered,
        phase=req.phase or phase_for_count(answered),
    )
    try:
        prof = profile_from_mapping(req.traits, req.patterns, req.dimensions)
        res = ENGINE.select_adaptive(prof, exclude, req.total_count, session)
    except SelectionInputError as e:
        raise HTTPException(400, str(e))
    return {
        "items": [_serialize_item(it) for it in res.items],
        "indicators": asdict(res.indicators),
        "budget": asdict(res.budget),
        "events": res.events,
    }

# ---- Bank diagnostics ----
@app.get("/bank/audit")
def bank_audit():
    return audit_items(BANK)

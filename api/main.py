# api/main.py
"""
FastAPI backend - exposes the beamframe solvers as a REST API.

    GET  /health
    POST /beam/solve     BeamDocument  → beam result document
    POST /frame/solve    FrameDocument → frame result document
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from beamframe import __version__
from beamframe.beam import ContinuousBeamSolver
from beamframe.document import BeamDocument, FrameDocument
from beamframe.errors import InputError, SingularMatrix, UnstableStructure
from beamframe.frame import FrameAnalysisSolver

logger = logging.getLogger("beamframe.api")

app = FastAPI(
    title="BeamFrame API",
    description="Continuous beam and planar frame analysis",
    version=__version__,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _reject(status: int, exc: Exception) -> HTTPException:
    logger.warning("Rejected analysis request: %s: %s", type(exc).__name__, exc)
    return HTTPException(status_code=status, detail=str(exc))


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "version": __version__}


@app.post("/beam/solve")
def solve_beam(doc: BeamDocument) -> Dict[str, Any]:
    """Analyse a continuous beam."""
    logger.info("Beam solve: %d nodes, %d spans, %d loads",
                len(doc.nodes), len(doc.spans), len(doc.loads))
    try:
        beam = doc.to_model()
    except InputError as exc:
        raise _reject(422, exc) from exc
    try:
        result = ContinuousBeamSolver(beam).solve()
    except (UnstableStructure, SingularMatrix) as exc:
        raise _reject(400, exc) from exc
    return result.to_dict()


@app.post("/frame/solve")
def solve_frame(doc: FrameDocument) -> Dict[str, Any]:
    """Analyse a planar frame."""
    logger.info("Frame solve: %d nodes, %d members, %d loads, sway=%s",
                len(doc.nodes), len(doc.members), len(doc.loads), doc.is_sway)
    try:
        frame = doc.to_model()
    except InputError as exc:
        raise _reject(422, exc) from exc
    try:
        result = FrameAnalysisSolver(frame).solve()
    except (UnstableStructure, SingularMatrix) as exc:
        raise _reject(400, exc) from exc
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""Flask REST API for genenav gene navigation sessions."""

import asyncio
import logging
import os
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from asgiref.wsgi import WsgiToAsgi
from flask import Flask, jsonify, request
from flask_cors import CORS

from genenav.api.evo2 import Evo2APIError, Evo2Client
from genenav.api.genome_api import GenomeAPI
from genenav.config import GeneNavSettings, load_settings
from genenav.core.controller import GeneContextController
from genenav.core.search import GeneSearch
from genenav.models.gene import Gene
from genenav.models.variant import EffectPrediction
from genenav.utils.logging_config import setup_logging

settings = load_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create Flask app
flask_app = Flask(__name__)

# Enable CORS for the browser frontend
CORS(flask_app, resources={r"/api/*": {"origins": "*"}})


_clock = time.monotonic


@dataclass
class NavigationSession:
    """One browsing session: a controller plus its data source. Memory only."""

    api: GenomeAPI
    controller: GeneContextController
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_used: float = 0.0


# Least recently used first; bounded by settings.max_sessions
_sessions: "OrderedDict[str, NavigationSession]" = OrderedDict()
_sessions_lock = threading.Lock()


def evict_sessions() -> None:
    """Drop sessions idle past the timeout, then the oldest beyond the cap."""
    now = _clock()
    with _sessions_lock:
        idle = [sid for sid, s in _sessions.items() if now - s.last_used > settings.session_idle_timeout]
        for session_id in idle:
            del _sessions[session_id]
        while len(_sessions) > settings.max_sessions:
            _sessions.popitem(last=False)
    if idle:
        logger.info(f"Expired {len(idle)} idle navigation sessions")


def create_session(app_settings: GeneNavSettings | None = None) -> tuple[str, NavigationSession]:
    app_settings = app_settings or settings
    api = GenomeAPI(app_settings)
    session = NavigationSession(
        api=api,
        controller=GeneContextController(api, max_view_range=app_settings.max_view_range),
        last_used=_clock(),
    )
    session_id = uuid.uuid4().hex
    with _sessions_lock:
        _sessions[session_id] = session
    evict_sessions()
    return session_id, session


def run_in_session(
    session: NavigationSession,
    action: Callable[[GeneContextController], Awaitable[Any]],
) -> Any:
    """Run a controller coroutine on a fresh event loop.

    HTTP connections are opened and closed per request because each request
    gets its own loop. Requests for one session are serialized: the session
    lock is held for the whole controller call, network fetches included.
    """

    async def runner() -> Any:
        async with session.api:
            return await action(session.controller)

    with session.lock:
        return asyncio.run(runner())


def run_with_api(action: Callable[[GenomeAPI], Awaitable[Any]]) -> Any:
    async def runner() -> Any:
        async with GenomeAPI(settings) as api:
            return await action(api)

    return asyncio.run(runner())


def snapshot_response(snapshot: Any, status: int = 200) -> tuple[Any, int]:
    return jsonify(snapshot.model_dump(mode="json", by_alias=True)), status


def get_session_or_404(session_id: str) -> NavigationSession | None:
    """Look up a live session and mark it as used."""
    evict_sessions()
    with _sessions_lock:
        session = _sessions.get(session_id)
        if session is not None:
            session.last_used = _clock()
            _sessions.move_to_end(session_id)
    return session


@flask_app.route("/api/health", methods=["GET"])
def health_check() -> tuple[Any, int]:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "service": "genenav API"}), 200


@flask_app.route("/api/genomes", methods=["GET"])
def list_genomes() -> tuple[Any, int]:
    """List assemblies grouped by organism."""
    try:
        genomes = run_with_api(lambda api: api.list_assemblies())
        return jsonify({
            "genomes": {
                organism: [g.model_dump(by_alias=True) for g in assemblies]
                for organism, assemblies in genomes.items()
            }
        }), 200
    except Exception as e:
        logger.error(f"Failed to load genomes: {str(e)}", exc_info=True)
        return jsonify({"error": "Failed to load genome data"}), 502


@flask_app.route("/api/genomes/<genome>/chromosomes", methods=["GET"])
def list_chromosomes(genome: str) -> tuple[Any, int]:
    """List primary chromosomes of an assembly."""
    try:
        chromosomes = run_with_api(lambda api: api.list_chromosomes(genome))
        return jsonify({"chromosomes": [c.model_dump() for c in chromosomes]}), 200
    except Exception as e:
        logger.error(f"Failed to load chromosomes for {genome}: {str(e)}", exc_info=True)
        return jsonify({"error": "Failed to load chromosomes data"}), 502


@flask_app.route("/api/genes/search", methods=["GET"])
def search_genes() -> tuple[Any, int]:
    """Search genes by query, or browse a chromosome with ?chrom=chr17.

    Query params:
        q: gene symbol or name
        chrom: chromosome to browse instead of a free-text query
        genome: assembly ID (defaults to the configured assembly)
    """
    genome = request.args.get("genome", settings.default_assembly)
    query = request.args.get("q", "")
    chrom = request.args.get("chrom")

    async def action(api: GenomeAPI) -> list[Gene]:
        search = GeneSearch(api, organism=settings.default_organism)
        if chrom:
            return await search.browse_chromosome(chrom, genome)
        return await search.search(query, genome)

    try:
        genes = run_with_api(action)
        return jsonify({"results": [g.model_dump() for g in genes]}), 200
    except Exception as e:
        logger.error(f"Gene search failed: {str(e)}", exc_info=True)
        return jsonify({"error": "Failed to search genes"}), 502


@flask_app.route("/api/sessions", methods=["POST"])
def open_session() -> tuple[Any, int]:
    session_id, session = create_session()
    logger.info(f"Opened navigation session {session_id}")
    return jsonify({"session_id": session_id, "state": session.controller.snapshot().model_dump(mode="json", by_alias=True)}), 201


@flask_app.route("/api/sessions/<session_id>", methods=["GET"])
def get_state(session_id: str) -> tuple[Any, int]:
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    return snapshot_response(session.controller.snapshot())


@flask_app.route("/api/sessions/<session_id>", methods=["DELETE"])
def close_session(session_id: str) -> tuple[Any, int]:
    with _sessions_lock:
        session = _sessions.pop(session_id, None)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    return jsonify({"status": "closed"}), 200


@flask_app.route("/api/sessions/<session_id>/gene", methods=["POST"])
def select_gene(session_id: str) -> tuple[Any, int]:
    """Select a gene from search results.

    Request body:
        {
            "gene": {"gene_id": "672", "symbol": "BRCA1", "chrom": "chr17", ...},
            "genome": "hg38"
        }
    """
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404

    try:
        data = request.get_json(silent=True)
        if not data or "gene" not in data:
            return jsonify({"error": "'gene' is required"}), 400
        gene = Gene(**data["gene"])
        genome = data.get("genome", settings.default_assembly)

        snapshot = run_in_session(session, lambda c: c.select_gene(gene, genome))
        return snapshot_response(snapshot)

    except ValueError as e:
        logger.error(f"Validation error: {str(e)}")
        return jsonify({"error": str(e)}), 400


@flask_app.route("/api/sessions/<session_id>/window", methods=["POST"])
def request_window(session_id: str) -> tuple[Any, int]:
    """Load a sequence window.

    Request body:
        {"start": "43044295", "end": "43047000"}

    Range errors are reported in ``sequence_status.error`` of the returned state.
    """
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404

    data = request.get_json(silent=True) or {}
    start, end = data.get("start", ""), data.get("end", "")
    snapshot = run_in_session(session, lambda c: c.request_window(start, end))
    return snapshot_response(snapshot)


@flask_app.route("/api/sessions/<session_id>/variants/refresh", methods=["POST"])
def refresh_variants(session_id: str) -> tuple[Any, int]:
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    snapshot = run_in_session(session, lambda c: c.refresh_variants())
    return snapshot_response(snapshot)


@flask_app.route("/api/sessions/<session_id>/variants/<clinvar_id>/analyze", methods=["POST"])
def analyze_variant(session_id: str, clinvar_id: str) -> tuple[Any, int]:
    """Score a ClinVar SNV with Evo2 and attach the result to the variant."""
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404

    controller = session.controller
    with session.lock:
        variant = controller.variant_set.get(clinvar_id)
        gene, assembly_id = controller.gene, controller.assembly_id
    if variant is None or assembly_id is None:
        return jsonify({"error": f"Variant {clinvar_id} is not in the current gene"}), 404

    async def analyze() -> EffectPrediction:
        async with Evo2Client(base_url=settings.evo2_url) as client:
            return await client.analyze_clinvar_variant(variant, assembly_id)

    # The session lock is not held during the prediction call, so other
    # requests on this session are not blocked behind it.
    result, error = None, None
    try:
        result = asyncio.run(analyze())
    except Exception as e:
        logger.warning(f"Evo2 analysis failed for {clinvar_id}: {str(e)}")
        error = str(e) if isinstance(e, Evo2APIError) else "Failed to analyze variant"

    with session.lock:
        if (controller.gene, controller.assembly_id) != (gene, assembly_id):
            logger.info(f"Dropping Evo2 result for {clinvar_id}: gene context changed")
            snapshot = controller.snapshot()
        elif error is not None:
            snapshot = controller.record_effect_error(clinvar_id, error)
        else:
            snapshot = controller.record_effect_prediction(clinvar_id, result)
    return snapshot_response(snapshot)


@flask_app.route("/api/sessions/<session_id>/comparison", methods=["POST"])
def select_comparison(session_id: str) -> tuple[Any, int]:
    """Request body: {"clinvar_id": "55502"}"""
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    data = request.get_json(silent=True) or {}
    with session.lock:
        snapshot = session.controller.select_for_comparison(data.get("clinvar_id"))
    return snapshot_response(snapshot)


@flask_app.route("/api/sessions/<session_id>/comparison", methods=["DELETE"])
def clear_comparison(session_id: str) -> tuple[Any, int]:
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    with session.lock:
        snapshot = session.controller.clear_comparison()
    return snapshot_response(snapshot)


@flask_app.route("/api/sessions/<session_id>/position", methods=["POST"])
def select_position(session_id: str) -> tuple[Any, int]:
    """Request body: {"position": 43045000}"""
    session = get_session_or_404(session_id)
    if session is None:
        return jsonify({"error": "Session not found"}), 404
    data = request.get_json(silent=True) or {}
    position = data.get("position")
    if position is not None and not isinstance(position, int):
        return jsonify({"error": "'position' must be an integer"}), 400
    with session.lock:
        snapshot = session.controller.select_position(position)
    return snapshot_response(snapshot)


@flask_app.errorhandler(404)
def not_found(error: Any) -> tuple[Any, int]:
    """Handle 404 errors."""
    return jsonify({"error": "Endpoint not found"}), 404


@flask_app.errorhandler(500)
def internal_error(error: Any) -> tuple[Any, int]:
    """Handle 500 errors."""
    logger.error(f"Internal server error: {str(error)}", exc_info=True)
    return jsonify({"error": "Internal server error"}), 500


# Wrap Flask app with ASGI adapter for async support
app = WsgiToAsgi(flask_app)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))

    flask_app.run(
        host="0.0.0.0",
        port=port,
        debug=os.environ.get("FLASK_ENV") == "development",
    )

#!/usr/bin/env python3
"""GhostCoder - HTTP chat surface.

Each message starts a background job; clients poll /api/status/<job_id>
for progress and fetch the project zip from /api/download/<job_id>.
"""

import io
import logging
import os
import threading
import time
import uuid

from flask import Flask, jsonify, request, send_file

from config.defaults import DEFAULTS
from core.memory import ProjectMemoryStore
from core.orchestrator import Orchestrator
from core.session import GhostSession
from manager.agent import CommandManager, Reply

logger = logging.getLogger(__name__)

app = Flask(__name__)
store = ProjectMemoryStore()
orchestrator = Orchestrator()
manager = CommandManager(GhostSession(orchestrator, store))

# Jobs keyed by job_id: {id: {"created", "status", "progress", "label", "reply"}}
_jobs = {}
_jobs_lock = threading.Lock()
_MAX_JOBS = DEFAULTS["max_jobs"]
_JOB_TTL = DEFAULTS["job_ttl"]


def _cleanup_jobs():
    """Remove expired jobs. Called under _jobs_lock."""
    now = time.time()
    expired = [jid for jid, job in _jobs.items() if now - job["created"] > _JOB_TTL]
    for jid in expired:
        del _jobs[jid]
    # If still over limit, remove oldest
    if len(_jobs) > _MAX_JOBS:
        by_age = sorted(_jobs.items(), key=lambda x: x[1]["created"])
        for jid, _ in by_age[:len(_jobs) - _MAX_JOBS]:
            del _jobs[jid]


def _store_job():
    """Register a new running job and return its ID."""
    job_id = str(uuid.uuid4())[:8]
    with _jobs_lock:
        _cleanup_jobs()
        _jobs[job_id] = {
            "created": time.time(),
            "status": "running",
            "progress": 0,
            "label": "Queued",
            "reply": None,
        }
    return job_id


def _get_job(job_id):
    """Get a job by ID, or None if not found/expired."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job and time.time() - job["created"] > _JOB_TTL:
            _jobs.pop(job_id, None)
            return None
    return job


def _update_job(job_id, **fields):
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job:
            job.update(fields)


def _progress_sink(job_id):
    def report(percent, label):
        _update_job(job_id, progress=percent, label=label)
    return report


def _run_job(job_id, user_id, message, server):
    try:
        reply = manager.handle(user_id, message, server=server, progress=_progress_sink(job_id))
    except Exception as e:
        logger.exception("Job %s crashed", job_id)
        _update_job(job_id, status="failed", reply=Reply(f"Error: {e}", kind="error"))
        return
    status = "failed" if reply.kind == "error" else "done"
    _update_job(job_id, status=status, reply=reply)


def _launch(job_id, target):
    threading.Thread(target=target, name=f"job-{job_id}", daemon=True).start()


def _reply_to_dict(reply):
    if reply is None:
        return None
    return {
        "text": reply.text,
        "kind": reply.kind,
        "buttons": reply.buttons,
        "archive_name": reply.archive_name,
        "has_archive": reply.archive is not None,
    }


def _job_to_dict(job_id, job):
    return {
        "job_id": job_id,
        "status": job["status"],
        "progress": job["progress"],
        "label": job["label"],
        "reply": _reply_to_dict(job["reply"]),
    }


@app.route("/api/agents")
def api_agents():
    agents = [{"name": name, "description": desc} for name, desc in orchestrator.list_agents()]
    return jsonify(agents)


@app.route("/api/message", methods=["POST"])
def api_message():
    """Accept a chat message and run it as a background job."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not str(data.get("user_id", "")).strip():
        return jsonify({"error": "Missing user_id"}), 400
    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return jsonify({"error": "Missing message"}), 400

    user_id = str(data["user_id"]).strip()
    message = message.strip()
    server = data.get("server")

    job_id = _store_job()
    _launch(job_id, lambda: _run_job(job_id, user_id, message, server))

    job = _get_job(job_id)
    return jsonify(_job_to_dict(job_id, job)), 202


@app.route("/api/status/<job_id>")
def api_status(job_id):
    job = _get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(_job_to_dict(job_id, job))


@app.route("/api/download/<job_id>")
def api_download(job_id):
    job = _get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    reply = job["reply"]
    if reply is None or reply.archive is None:
        return jsonify({"error": "No archive for this job"}), 404
    return send_file(
        io.BytesIO(reply.archive),
        mimetype="application/zip",
        as_attachment=True,
        download_name=reply.archive_name,
    )


@app.route("/api/interaction", methods=["POST"])
def api_interaction():
    data = request.get_json(silent=True) or {}
    custom_id = data.get("custom_id")
    if not custom_id:
        return jsonify({"error": "Missing custom_id"}), 400
    return jsonify(_reply_to_dict(manager.handle_button(custom_id)))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    store.init_db()
    port = int(os.environ.get("PORT", 5001))
    print(f"GhostCoder running at http://localhost:{port}")
    app.run(debug=False, port=port, threaded=True)

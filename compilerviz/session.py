"""
On-disk store for compile sessions.

Each session lives in its own directory under the store root:

    <root>/<session_id>/source.c                  raw input
    <root>/<session_id>/result.json               the full session document
    <root>/<session_id>/compilation_results.zip   written by "all" downloads

A session document is written once, when the session is created, and only
read afterwards.
"""

import json
import logging
import os
import random
import re
import tempfile
import uuid

from . import compiler
from .errors import EmptyInput, SessionNotFound, StorageFailure

logger = logging.getLogger(__name__)

SESSION_ID_RE = re.compile(r'^compile_[0-9a-f]{32}$')

SOURCE_FILE = "source.c"
RESULT_FILE = "result.json"
ARCHIVE_FILE = "compilation_results.zip"


def new_session_id():
    return f"compile_{uuid.uuid4().hex}"


class SessionStore:
    def __init__(self, root, rng=None):
        self.root = root
        self.rng = rng if rng is not None else random.Random()

    def session_dir(self, session_id):
        if not session_id or not SESSION_ID_RE.match(session_id):
            raise SessionNotFound()
        return os.path.join(self.root, session_id)

    def create(self, source):
        if not source or not source.strip():
            raise EmptyInput()

        session_id = new_session_id()
        stages = compiler.run_pipeline(source, self.rng)
        session = {
            "session_id": session_id,
            "success": True,
            "stages": stages,
            "outputs": compiler.collect_outputs(stages),
        }

        path = self.session_dir(session_id)
        try:
            os.makedirs(path)
            with open(os.path.join(path, SOURCE_FILE), "w", encoding="utf-8") as f:
                f.write(source)
            self._write_json(os.path.join(path, RESULT_FILE), session)
        except OSError as e:
            logger.error("could not write session %s: %s", session_id, e)
            raise StorageFailure("Compilation result could not be saved") from e

        logger.info("created session %s (%d tokens)", session_id, len(session["outputs"]["tokens"]))
        return session

    def load(self, session_id):
        path = os.path.join(self.session_dir(session_id), RESULT_FILE)
        if not os.path.isfile(path):
            logger.warning("session %s not found", session_id)
            raise SessionNotFound()
        try:
            with open(path, encoding="utf-8") as f:
                session = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("could not read session %s: %s", session_id, e)
            raise StorageFailure() from e

        stages = session.get("stages") if isinstance(session, dict) else None
        if not isinstance(stages, list) or "outputs" not in session:
            logger.error("session %s has a malformed document", session_id)
            raise StorageFailure()
        return session

    def write_archive(self, session_id, content):
        path = os.path.join(self.session_dir(session_id), ARCHIVE_FILE)
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error("could not write archive for %s: %s", session_id, e)
            raise StorageFailure("Download archive could not be saved") from e
        return path

    def _write_json(self, path, document):
        # readers never see a half-written result.json
        fd, tmp = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=4)
            os.replace(tmp, path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

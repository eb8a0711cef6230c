from __future__ import annotations

import pytest

from nuance_qc.config import settings
from nuance_qc.db import session as db_session
from nuance_qc.db.base import Base
from nuance_qc.db.bootstrap import init_db
from nuance_qc.modules.telemetry.service import reset_gate_telemetry


@pytest.fixture(autouse=True)
def _reset_db_and_defaults(tmp_path) -> None:
    settings.generator_provider = "fake"
    settings.generator_api_key = ""
    settings.generator_timeout_s = 45.0
    settings.history_window = 20
    db_session.rebind_engine(f"sqlite+pysqlite:///{tmp_path / 'nuance_qc_test.db'}")
    reset_gate_telemetry()
    Base.metadata.drop_all(bind=db_session.engine)
    init_db()
    yield
    reset_gate_telemetry()
    Base.metadata.drop_all(bind=db_session.engine)
    db_session.engine.dispose()

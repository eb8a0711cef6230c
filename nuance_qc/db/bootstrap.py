from nuance_qc.db import session as db_session
from nuance_qc.db.base import Base
from nuance_qc.db.models import GateRunRecord, NarrativeFingerprintRecord  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=db_session.engine)

from .adjustments import Adjustment, TxFacts, effect_of, reversal_of
from .engine import Applied, NewTransaction, ReconciliationEngine, TransactionEdits
from .store import RecordStore, SqlRecordStore

__all__ = [
    "Adjustment",
    "TxFacts",
    "effect_of",
    "reversal_of",
    "Applied",
    "NewTransaction",
    "TransactionEdits",
    "ReconciliationEngine",
    "RecordStore",
    "SqlRecordStore",
]

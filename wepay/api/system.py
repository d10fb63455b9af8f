"""
Ledger system wiring and the FastAPI dependency that exposes it
"""

from typing import Optional
from zoneinfo import ZoneInfo

from ..balances import BalanceEngine
from ..config import get_config
from ..ledger import LedgerStore
from ..logging_config import setup_logging
from ..storage import create_storage


class WePaySystem:
    """Storage, balance engine and ledger store initialized together"""
    
    def __init__(self, storage_backend: Optional[str] = None, sqlite_path: Optional[str] = None,
                 duplicate_timezone: Optional[str] = None):
        config = get_config()
        
        self.storage = create_storage(
            storage_backend or config.storage_backend,
            sqlite_path or config.sqlite_path
        )
        
        tz_name = config.duplicate_window_timezone if duplicate_timezone is None else duplicate_timezone
        self.engine = BalanceEngine()
        self.ledger = LedgerStore(
            self.storage,
            engine=self.engine,
            duplicate_timezone=ZoneInfo(tz_name) if tz_name else None
        )
    
    def close(self) -> None:
        self.storage.close()


_system: Optional[WePaySystem] = None


def get_system() -> WePaySystem:
    """Process-wide system, built from configuration on first use"""
    global _system
    if _system is None:
        config = get_config()
        setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
        _system = WePaySystem()
    return _system

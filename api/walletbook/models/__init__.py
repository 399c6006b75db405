from .base import Base
from .wallet import Wallet
from .theme import Theme
from .transaction import Transaction

__all__ = ["Base", "Wallet", "Theme", "Transaction"]

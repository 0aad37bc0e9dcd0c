"""Cart and favorites domain services.

* :mod:`.reconciler` translates between stored payload encodings.
* :mod:`.user_state` owns atomic access to per-user records.
* :mod:`.cart_service` and :mod:`.favorites_service` implement the operations.
* :mod:`.catalog` resolves product display metadata for responses.
"""

from .cart_service import CartService
from .favorites_service import FavoritesService

__all__ = ["CartService", "FavoritesService"]

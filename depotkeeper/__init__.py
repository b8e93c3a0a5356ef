"""depotkeeper: version lifecycle and purge for the artifact metadata depot.

  - Retention-count eviction (documents removed, version kept listed)
  - Hard deletion of single versions, snapshot branch included
  - Reconciliation-driven deletion of versions dropped upstream
  - Pluggable per-artifact-type handlers (entities, versioned entities,
    file generations)
  - Structured purge outcomes; handler failures collected, not thrown
"""

__version__ = "0.1.0"
__description__ = "Version retention, eviction and reconciliation for an artifact depot"

from depotkeeper.core.depot import Depot
from depotkeeper.core.purge_service import PurgeService
from depotkeeper.models.purge import PurgeOutcome

__all__ = ["Depot", "PurgeService", "PurgeOutcome", "__version__"]

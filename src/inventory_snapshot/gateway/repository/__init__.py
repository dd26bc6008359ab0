"""Version-control access for snapshot resolution."""

from inventory_snapshot.gateway.repository.abc import RepositoryClient as RepositoryClient
from inventory_snapshot.gateway.repository.real import (
    RealRepositoryClient as RealRepositoryClient,
)

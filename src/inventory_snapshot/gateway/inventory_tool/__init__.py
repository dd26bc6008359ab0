"""External inventory tool invocation."""

from inventory_snapshot.gateway.inventory_tool.abc import (
    InventoryToolRunner as InventoryToolRunner,
)
from inventory_snapshot.gateway.inventory_tool.abc import ToolOutput as ToolOutput
from inventory_snapshot.gateway.inventory_tool.real import (
    RealInventoryToolRunner as RealInventoryToolRunner,
)

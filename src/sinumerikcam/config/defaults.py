"""Default constants and the built-in starter stock.

These mirror what the ShopMill controller and the simulation viewport
expect out of the box; users can override most of them through
:class:`~sinumerikcam.config.settings.AppSettings`.
"""

from ..core.stock import StockDescription, StockShape

# Fractional digits kept by the shared number formatter
FORMAT_DECIMALS = 3

# Clearance height used for plunge/retract moves in the simulation curve
SAFE_Z = 5.0

# Arc sampling for the simulation curve (ARC_SAMPLES + 1 points per arc)
ARC_SAMPLES = 50

# Face-mill width/length when the operation leaves them unset
FACE_MILL_FALLBACK_EXTENT = 100.0

# Tool diameter assumed for the rendered path thickness when unset
DEFAULT_TOOL_DIAMETER = 10.0

# Per-operation path colours, cycled by operation index
OPERATION_COLORS = (0xD97706, 0x059669, 0x2563EB, 0xDB2777, 0x7C3AED)

# File name understood by the controller's program manager
DEFAULT_PROGRAM_NAME = "program.mpf"


def build_default_stock() -> StockDescription:
    """Return the 100 x 100 x 20 aluminium block a new session starts with."""
    return StockDescription(
        shape=StockShape.RECTANGULAR,
        width=100.0,
        length=100.0,
        height=20.0,
        diameter=0.0,
        material="Aluminum",
    )

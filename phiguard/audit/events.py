"""Event type constants for the scan audit trail."""
from __future__ import annotations

EVENT_PHI_DETECTION_COMPLETED = "phi_detection_completed"
EVENT_PHI_SCAN_FILE = "phi_scan_file"
EVENT_PHI_SCAN_SELECTION = "phi_scan_selection"

VALID_EVENT_TYPES: frozenset[str] = frozenset({
    EVENT_PHI_DETECTION_COMPLETED,
    EVENT_PHI_SCAN_FILE,
    EVENT_PHI_SCAN_SELECTION,
})

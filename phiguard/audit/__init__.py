"""Append-only audit trail for PHI scans.

Only scan metadata is recorded (counts, lengths, context, a salted
content fingerprint); scanned text and matched values never reach the
audit store.
"""

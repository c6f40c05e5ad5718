"""Access app for the Arogya Saathi backend.

Holds the OTP access-grant state machine, the gated record gateway and the
HTTP views that expose them.
"""

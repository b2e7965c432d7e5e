"""
Backend: downstream consumers of detected anomalies and the operator CLI.
"""

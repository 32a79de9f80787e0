"""Staccato - a clickable status line daemon (daemon & trigger client).

The daemon periodically runs a list of shell commands ("segments") and
publishes their joined output as one status line. The client asks the
daemon to re-run a single segment, addressed by index, tag or by the
character offset clicked in the status line.
"""

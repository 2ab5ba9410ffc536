"""
RPC - JSON-RPC plumbing between the client and the Frame wallet.

Provides transports (loopback HTTP via httpx, WebSocket via websockets),
frame types, the request/response correlator, typed result accessors and
the notification channel for unsolicited wallet pushes.
"""

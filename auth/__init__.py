"""
auth — hub request authentication.

Provides:
  • Hub token creation & verification (HMAC-SHA256)
  • ``HubPrincipal`` carrying the hub user's id and email
"""

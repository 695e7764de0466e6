"""auth/ -- Credentials, bearer sessions and request authorization.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/, locations/, products/, or orders/.
api/ imports from auth/, not the other way around.
"""
